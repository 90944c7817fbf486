import os

chdir = "votehall_app"
wsgi_app = "config.wsgi:application"

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "3"))
timeout = int(os.getenv("GUNICORN_TIMEOUT", "30"))

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1")
access_log_format = '%({x-forwarded-for}i)s %(t)s "%(r)s" %(s)s %(b)s %(L)ss'

# Probe traffic is filtered from the access log; failures still show up.
logconfig_dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "health_endpoint": {"()": "config.logging_filters.HealthEndpointFilter"},
    },
    "formatters": {
        "plain": {"format": "%(message)s"},
        "verbose": {"format": "[{asctime}] {levelname} {name}: {message}", "style": "{"},
    },
    "handlers": {
        "access": {"class": "logging.StreamHandler", "formatter": "plain", "stream": "ext://sys.stdout"},
        "errors": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "loggers": {
        "gunicorn.access": {"handlers": ["access"], "filters": ["health_endpoint"], "level": "INFO", "propagate": False},
        "gunicorn.error": {"handlers": ["errors"], "level": "INFO", "propagate": False},
    },
}
