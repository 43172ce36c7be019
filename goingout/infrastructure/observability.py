"""Structured Logging — one JSON object per line, keyed by the social-graph ids.

Invariants:
    - Every line has timestamp (record creation time, UTC), level, logger, message
    - Only the allow-listed extras are emitted: viewer/venue/plan/friendship ids,
      scope, error code, request path, retry attempt
    - Ids (UUIDs) and other non-JSON values are rendered with str()
    - setup_logging is idempotent: calling it twice never doubles output
"""

import json
import logging
from datetime import datetime, timezone

DOMAIN_LOG_KEYS = (
    "user_id", "venue_id", "scope", "friendship_id", "plan_id",
    "error_code", "path", "attempt",
)

_HANDLER_NAME = "goingout"


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line."""

    def __init__(self, extra_keys: tuple[str, ...] = DOMAIN_LOG_KEYS):
        super().__init__()
        self.extra_keys = extra_keys

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(
            (key, record.__dict__[key])
            for key in self.extra_keys
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the service handler on the root logger, replacing a previous one."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"),
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # SQL echo belongs to debugging sessions, not service logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return handler
