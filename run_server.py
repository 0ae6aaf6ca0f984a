#!/usr/bin/env python
"""
Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py

    Or with Gunicorn:
    gunicorn bio_storefront.main:app -c gunicorn.conf.py
"""

import argparse
import os
import subprocess

import uvicorn

from bio_storefront.config import get_settings

APP = "bio_storefront.main:app"


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    uvicorn.run(
        APP,
        host=get_settings().api_host,
        port=port,
        reload=True,
        reload_dirs=["bio_storefront"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server(port: int):
    """Run production server with Uvicorn directly."""
    uvicorn.run(
        APP,
        host=get_settings().api_host,
        port=port,
        workers=int(os.getenv("WORKERS", 4)),
        log_level=get_settings().monitoring.log_level.lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


def run_gunicorn():
    """Run with Gunicorn (recommended for production)."""
    subprocess.run(["gunicorn", APP, "-c", "gunicorn.conf.py"], check=True)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Bio Storefront API Server")
    parser.add_argument("--dev", action="store_true", help="Run in development mode with auto-reload")
    parser.add_argument("--gunicorn", action="store_true", help="Run with Gunicorn (production)")
    parser.add_argument("--port", type=int, default=None, help="Port to run on (default: API_PORT)")

    args = parser.parse_args()
    port = args.port or get_settings().api_port

    if args.dev:
        run_dev_server(port)
    elif args.gunicorn:
        os.environ["BIND"] = f"{get_settings().api_host}:{port}"
        run_gunicorn()
    else:
        run_prod_server(port)
