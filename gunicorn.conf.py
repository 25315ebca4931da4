"""
Gunicorn configuration for the HabitPulse API server.

Run with:  gunicorn habitpulse.main:app -c gunicorn.conf.py

Env vars that override defaults:
  PORT       TCP port to bind (default: 8000)
  WORKERS    number of worker processes (default: 2)
  LOG_LEVEL  shared with the application settings
"""
import os

# Bind to the port the platform injects via $PORT
bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Each worker holds its own SQLAlchemy pool; keep WORKERS x pool_size
# under the database connection limit.
workers = int(os.environ.get("WORKERS", "2"))

# Each worker runs Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

# Keep connections alive for 5 s between requests.
keepalive = 5

# Analytics endpoints load full execution history; allow 60 s per request.
timeout = 60

# Application logs go through structlog; gunicorn only writes access lines.
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

# Graceful restart: wait up to 30 s for in-flight requests to finish.
graceful_timeout = 30
