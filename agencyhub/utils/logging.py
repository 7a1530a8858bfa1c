"""
Logging

stdlib logging, configured once at startup. Development gets one readable
line per record; production gets one JSON object per line so the
agency/user fields can be searched on.

Pass identifiers through `extra=`; caller_extra() builds that dict from a
CallerContext.
"""
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional

# Attributes lifted from `extra=` into the JSON document
CONTEXT_FIELDS = (
    "agency_id",
    "user_id",
    "role",
    "capability",
    "event_type",
    "security_event",
    "deleted",
    "attempt",
    "path",
    "method",
)

TEXT_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

# Chatty third-party loggers, kept at WARNING unless LOG_LEVEL is DEBUG
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "passlib")


class JSONFormatter(logging.Formatter):
    """One JSON document per record."""

    def format(self, record: logging.LogRecord) -> str:
        document: Dict[str, Any] = {
            "ts": datetime.utcnow().isoformat(timespec="milliseconds") + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        document.update(
            (name, getattr(record, name)) for name in CONTEXT_FIELDS if hasattr(record, name)
        )
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)

        return json.dumps(document, default=str)


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Install a single stdout handler on the root logger.

    Calling it again replaces the handler instead of adding a second one.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    quiet = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def caller_extra(context, **more: Any) -> Dict[str, Any]:
    """`extra=` payload identifying who made a call."""
    extra = {
        "user_id": context.user_id,
        "agency_id": context.agency_id,
        "role": context.role,
    }
    extra.update(more)
    return extra


def log_security_event(
    event_type: str,
    details: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Record a security-relevant event at WARNING.

    Event types in use:
    - failed_login: wrong password, unknown email or disabled account
    - permission_denied: a role lacked the capability for a mutation
    - cascade_delete: an agency went away with its last member
    - agency_purged: a super_admin removed an agency outright
    """
    (logger or logging.getLogger("agencyhub.security")).warning(
        f"security event: {event_type}",
        extra={"security_event": True, "event_type": event_type, **details},
    )
