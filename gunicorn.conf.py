"""
Gunicorn Configuration

Runs the dashboard API with Uvicorn workers. SQLite serializes writes
itself; the API only reads, so several workers can share the file.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:5000")
backlog = 2048

# Worker processes
workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count() * 2 + 1, 8)))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "ecommerce-dashboard-api"

# Logging
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = "-"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'
