"""
Logging setup shared by the API and the refresh job.

Provider URLs and error bodies can carry bearer material, so every record
passes through :class:`TokenRedactionFilter` before it is emitted.
"""

import logging
import re
import sys

_SECRET_PARAMS = re.compile(
    r"(?<![A-Za-z_])(?P<key>access_token|fb_exchange_token|client_secret|code_verifier|code)"
    r"(?P<sep>=|\":\s*\")"
    r"(?P<value>[^&\s\"]+)"
)


def redact(message: str) -> str:
    """Mask token-like query or JSON values in ``message``."""
    return _SECRET_PARAMS.sub(r"\g<key>\g<sep>[redacted]", message)


class TokenRedactionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(record.getMessage())
        record.args = None
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, TokenRedactionFilter) for f in handler.filters):
            handler.addFilter(TokenRedactionFilter())
    # httpx logs every request URL at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["TokenRedactionFilter", "configure_logging", "redact"]
