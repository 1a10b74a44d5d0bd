#!/usr/bin/env python
"""
Server Entry Point

Starts the dashboard API.
Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py

    Or with Gunicorn:
    gunicorn ecommerce_dashboard.main:app -c gunicorn.conf.py

Load the data first:
    python -m ecommerce_dashboard.ingestion.etl
"""

import argparse
import os
import subprocess

from ecommerce_dashboard.config import get_settings

settings = get_settings()


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    import uvicorn

    uvicorn.run(
        "ecommerce_dashboard.main:app",
        host=settings.api.host,
        port=port,
        reload=True,
        reload_dirs=["ecommerce_dashboard"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server(port: int):
    """Run production server with Uvicorn directly."""
    import uvicorn

    uvicorn.run(
        "ecommerce_dashboard.main:app",
        host=settings.api.host,
        port=port,
        workers=settings.api.workers,
        log_level=settings.monitoring.log_level.lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


def run_gunicorn(port: int):
    """Run with Gunicorn."""
    env = dict(os.environ, BIND=f"{settings.api.host}:{port}")
    subprocess.run(
        ["gunicorn", "ecommerce_dashboard.main:app", "-c", "gunicorn.conf.py"],
        env=env,
        check=False,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="E-Commerce Dashboard API Server")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Run in development mode with auto-reload"
    )
    parser.add_argument(
        "--gunicorn",
        action="store_true",
        help="Run with Gunicorn"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.api.port,
        help="Port to run on (default: %(default)s)"
    )

    args = parser.parse_args()

    if args.dev:
        print("Starting development server...")
        run_dev_server(args.port)
    elif args.gunicorn:
        print("Starting production server with Gunicorn...")
        run_gunicorn(args.port)
    else:
        print("Starting production server with Uvicorn...")
        run_prod_server(args.port)
