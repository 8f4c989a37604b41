"""
Gunicorn production configuration
Worker count scales with CPU cores

Run with:
  gunicorn -c gunicorn_conf.py user_service.main:app

Every value can be overridden through environment variables (GUNICORN_*).
Application settings (store, sessions, logging) live in
user_service.core.config.Settings.

Each worker is a separate process. Sessions and users must live in shared
backends (SESSION_BACKEND=redis, STORE_BACKEND=sql), which Settings enforces
outside ENVIRONMENT=local. To run with the memory backends, set
GUNICORN_WORKERS=1.
"""
import multiprocessing
import os

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8080")

# Recommended: (2 x cores) + 1
workers = int(os.getenv("GUNICORN_WORKERS", (2 * multiprocessing.cpu_count()) + 1))

worker_class = "uvicorn.workers.UvicornWorker"

worker_connections = int(os.getenv("GUNICORN_WORKER_CONNECTIONS", 1000))

# Recycle workers periodically, with jitter so they do not restart together
max_requests = int(os.getenv("GUNICORN_MAX_REQUESTS", 1000))
max_requests_jitter = int(os.getenv("GUNICORN_MAX_REQUESTS_JITTER", 50))

timeout = int(os.getenv("GUNICORN_TIMEOUT", 120))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", 5))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", 30))

preload_app = True

# The application writes its own JSON access log; gunicorn only reports errors
accesslog = None
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")

proc_name = "user-service"


def on_starting(server):
    server.log.info(f"Starting user-service with {workers} workers")


def worker_int(worker):
    worker.log.info(f"Worker {worker.pid} received SIGINT/SIGQUIT")


def on_exit(server):
    server.log.info("user-service shutting down")
