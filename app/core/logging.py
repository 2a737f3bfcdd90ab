import logging
import os
from typing import Any, MutableMapping, Optional


DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | user=%(user_id)s "
    "fp=%(fingerprint)s | %(message)s"
)

CONTEXT_FIELDS = ("user_id", "fingerprint")


class ContextFilter(logging.Filter):
    """Fills in generation context fields so the formatter never raises KeyError."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, "-")
        return True


class GenerationLogAdapter(logging.LoggerAdapter):
    """Attaches the requesting user and source fingerprint to every record.

    Only the fingerprint is ever logged; source text stays out of the logs.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        fingerprint = extra.get("fingerprint")
        if isinstance(fingerprint, str) and len(fingerprint) > 12:
            extra["fingerprint"] = fingerprint[:12]
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Initialize root logger with a sane formatter and context filter."""
    resolved_level = getattr(logging, (level or DEFAULT_LEVEL), logging.INFO)
    formatter = logging.Formatter(fmt or DEFAULT_FORMAT)

    root = logging.getLogger()
    root.setLevel(resolved_level)

    # Clear existing handlers to avoid duplicate logs in reloads
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensure root is initialized."""
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)


def bind_generation_context(
    logger: logging.Logger, *, user_id: Any, fingerprint: str
) -> GenerationLogAdapter:
    return GenerationLogAdapter(
        logger, {"user_id": user_id, "fingerprint": fingerprint}
    )
