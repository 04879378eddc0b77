# gunicorn -c gunicorn.conf.py app:app
import os

preload_app = True

workers = int(os.environ.get("WEB_CONCURRENCY", "2"))

bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"

# Logging (app logs are JSON on stdout, see utils/logger.py)
accesslog = "-"
errorlog = "-"
loglevel = "info"

timeout = 30
