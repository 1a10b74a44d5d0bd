"""
E-Commerce Admin Dashboard

CSV ETL into SQLite and a read-only JSON API over users, orders and products.
"""

__version__ = "1.0.0"
