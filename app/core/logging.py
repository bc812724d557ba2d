import logging


class RedactionFilter(logging.Filter):
    """Mask credentials passed to loggers through ``extra``."""

    BLOCKED_KEYS = {
        "password",
        "current_password",
        "new_password",
        "token",
        "access_token",
        "refresh_token",
        "api_secret",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        for key in self.BLOCKED_KEYS:
            if hasattr(record, key):
                setattr(record, key, "[REDACTED]")
        return True


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    redaction = RedactionFilter()
    for handler in logging.getLogger().handlers:
        if not any(isinstance(existing, RedactionFilter) for existing in handler.filters):
            handler.addFilter(redaction)
