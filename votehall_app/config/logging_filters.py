import logging
from collections.abc import Mapping

HEALTH_PATHS: frozenset[str] = frozenset({"/healthz", "/readyz"})


def _path_and_status(record: logging.LogRecord) -> tuple[str, str] | None:
    args = record.args
    # gunicorn.access passes its atoms dict: U is the path, s the status.
    if isinstance(args, Mapping):
        return str(args.get("U", "")), str(args.get("s", ""))
    # django.server logs '"%s" %s %s' % (request_line, code, size) with status_code in extra.
    status_code = getattr(record, "status_code", None)
    if status_code is not None and isinstance(args, tuple) and args:
        parts = str(args[0]).split()
        return (parts[1] if len(parts) > 1 else ""), str(status_code)
    return None


class HealthEndpointFilter(logging.Filter):
    """Drop successful health probe lines; keep failing probes visible."""

    def filter(self, record: logging.LogRecord) -> bool:
        parsed = _path_and_status(record)
        if parsed is not None:
            path, status = parsed
            return not (path.split("?", 1)[0] in HEALTH_PATHS and status == "200")

        message = record.getMessage()
        if any(path in message for path in HEALTH_PATHS):
            return " 200 " not in message
        return True
