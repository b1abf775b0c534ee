"""Gunicorn production configuration for the catalog import API."""
import multiprocessing

wsgi_app = "catalog_import.main:app"
bind = "0.0.0.0:8000"
workers = multiprocessing.cpu_count() + 1
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
# Imports run row by row against the catalog
timeout = 300
keepalive = 5
max_requests = 1000
max_requests_jitter = 100
preload_app = True
accesslog = "-"
errorlog = "-"
loglevel = "info"
