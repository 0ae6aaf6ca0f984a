"""
Gunicorn Configuration

Uvicorn workers under Gunicorn for production deployment.
"""

import multiprocessing
import os

bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 10000
max_requests_jitter = 1000
timeout = 60
keepalive = 5
graceful_timeout = 30

proc_name = "bio-storefront-api"

# structlog renders application logs; gunicorn only reports its own
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = None
