# Gunicorn configuration file for the TalentMatch AI API

import os

# Server socket
bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"
backlog = 2048

# Worker processes
workers = int(os.getenv("WEB_CONCURRENCY", "4"))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
# OCR and two chat completions per job match can take a while
timeout = 180
keepalive = 5

max_requests = 1000
max_requests_jitter = 100

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = 'talentmatch_ai_api'

# Server mechanics
daemon = False
pidfile = './gunicorn.pid'
tmp_upload_dir = None

preload_app = True
reload = False
