"""Logging utilities that keep tokens and secrets out of log output.

Provides:
- A filter masking SigV4 signature material in any log message
- A helper redacting secret properties before they are logged
- Logging configuration for the command line tool
"""

import json
import logging
import logging.config
import re
from collections.abc import Mapping
from pathlib import Path

from iam_dbauth.config import PropertyKeys

logger = logging.getLogger(__name__)

REDACTED = "hidden-from-log"

_SIGNATURE_PARAMS = re.compile(r"(X-Amz-(?:Signature|Security-Token)=)[^&\s'\"]+")


def redact_token(text: str) -> str:
    """Mask the signature and session token query parameters of a presigned URL."""
    return _SIGNATURE_PARAMS.sub(rf"\1{REDACTED}", text)


def redact_properties(properties: Mapping[str, str]) -> dict[str, str]:
    """Copy of the properties with secret values replaced."""
    redacted = dict(properties)
    for key in PropertyKeys.secret():
        if key in redacted:
            redacted[key] = REDACTED
    return redacted


class SecretRedactingFilter(logging.Filter):
    """Masks presigned token signatures in log records.

    Attach to handlers that may receive records from delegate driver
    libraries, which can echo connection arguments in their errors.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact_token(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def configure_logging(level: int = logging.INFO, config_path: Path | None = None) -> None:
    """Configure logging for command line use.

    Uses a JSON dictConfig file when one is given and exists, otherwise a
    simple text format. A SecretRedactingFilter is attached to every root handler.
    """
    if config_path is not None and config_path.exists():
        with open(config_path) as f:
            logging.config.dictConfig(json.load(f))
    else:
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SecretRedactingFilter) for f in handler.filters):
            handler.addFilter(SecretRedactingFilter())
