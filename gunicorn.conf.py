# =============================================================================
# Trackball API - Gunicorn Production Configuration
# =============================================================================
import os
import multiprocessing

bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"
wsgi_app = "run:app"

# Short JSON requests only: a few threaded workers are enough
workers = int(os.environ.get('WEB_CONCURRENCY', min(multiprocessing.cpu_count() * 2 + 1, 4)))
threads = 4
worker_class = "gthread"
preload_app = True

timeout = 30
graceful_timeout = 15
keepalive = 5

# Application logs are JSON on stdout, access log stays plain
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info")

max_requests = 2000
max_requests_jitter = 100

limit_request_line = 8190
limit_request_fields = 100

forwarded_allow_ips = "*"
