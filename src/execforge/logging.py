"""Logging configuration with credential redaction."""

import logging
import re
from typing import ClassVar


class CredentialRedactingFilter(logging.Filter):
    """Filter that redacts passwords and session tokens from log messages."""

    SECRET_PATTERNS: ClassVar[list[tuple[re.Pattern[str], str]]] = [
        # json-ish "password": "..." as found in login payloads
        (
            re.compile(r"(['\"]password['\"]\s*:\s*['\"])[^'\"]*(['\"])", re.IGNORECASE),
            r"\1[REDACTED]\2",
        ),
        # password=... in urls or key=value text
        (re.compile(r"(password[=:]\s*)[^\s,&\]]+", re.IGNORECASE), r"\1[REDACTED]"),
        # super secure / temporary tokens the platform hands out as cookies
        (re.compile(r"(GDCAuth(?:SST|TT)=)[^\s;,]+"), r"\1[REDACTED]"),
        (re.compile(r"(X-GDC-Auth(?:SST|TT):\s*)[^\s,\]]+", re.IGNORECASE), r"\1[REDACTED]"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._redact(str(record.msg))
        if record.args:
            record.args = tuple(
                self._redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True

    def _redact(self, text: str) -> str:
        for pattern, replacement in self.SECRET_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI.

    Args:
        verbose: Enable debug level logging.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    redaction_filter = CredentialRedactingFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(redaction_filter)

    # httpx logs every request at INFO, too chatty
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
