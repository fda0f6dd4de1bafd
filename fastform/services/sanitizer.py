"""
Data Sanitizer

Deep-copies submission data and neutralizes executable content in every
string leaf before the data is stored or displayed.

Sanitization is idempotent: each string is rewritten until it reaches a fixed
point, so sanitizing already-sanitized data returns it unchanged. That lets
resubmission flows re-sanitize merged data safely.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from fastform.config import get_settings
from fastform.core.exceptions import SanitizationDepthError, SanitizationKeyConflictError

logger = logging.getLogger(__name__)

# Elements removed together with their content
_DANGEROUS_BLOCK_RE = re.compile(
    r"<\s*(script|iframe|style|object|embed)\b[^>]*>.*?<\s*/\s*\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_TAG_RE = re.compile(r"<[^>]*>")
_EVENT_HANDLER_RE = re.compile(r"\bon[a-z]+\s*=", re.IGNORECASE)
_SCRIPT_URI_RE = re.compile(
    r"(?:java\s*script|vb\s*script)\s*:|data\s*:\s*text\s*/\s*html",
    re.IGNORECASE,
)

_SCALAR_TYPES = (bool, int, float)


def _sanitize_once(value: str) -> str:
    value = value.strip()
    value = _DANGEROUS_BLOCK_RE.sub("", value)
    value = _TAG_RE.sub("", value)
    value = _EVENT_HANDLER_RE.sub("", value)
    value = _SCRIPT_URI_RE.sub("", value)
    # Unpaired angle brackets left after tag removal are encoded
    value = value.replace("<", "&lt;").replace(">", "&gt;")
    return value.strip()


def sanitize_string(value: str) -> str:
    """
    Strip markup and script-bearing constructs from a string.

    - trims surrounding whitespace
    - removes <script>, <iframe>, <style>, <object>, <embed> blocks with content
    - removes all other tags, keeping their text
    - removes on*= event handler attributes
    - removes javascript:, vbscript: and data:text/html schemes
    - entity-encodes any remaining < and >
    """
    previous = None
    while value != previous:
        previous = value
        value = _sanitize_once(value)
    return value


def sanitize_submission_data(
    data: Mapping[str, Any],
    *,
    max_depth: int | None = None,
    overflow: str | None = None,
) -> dict[str, Any]:
    """
    Return a sanitized deep copy of submission data.

    Args:
        data: Raw submission data (not modified)
        max_depth: Maximum container nesting, root included
            (defaults to settings.sanitizer_max_depth)
        overflow: "truncate" replaces deeper containers with None,
            "reject" raises (defaults to settings.sanitizer_overflow)

    Returns:
        Data of the same shape; tuples become lists

    Raises:
        SanitizationDepthError: If overflow is "reject" and data nests too deep
        SanitizationKeyConflictError: If two keys of a mapping sanitize to the
            same key
    """
    settings = get_settings()
    if max_depth is None:
        max_depth = settings.sanitizer_max_depth
    if overflow is None:
        overflow = settings.sanitizer_overflow
    if overflow not in ("truncate", "reject"):
        raise ValueError(f"overflow must be 'truncate' or 'reject', got {overflow!r}")

    truncated = 0

    def walk(value: Any, depth: int) -> Any:
        nonlocal truncated

        if value is None or isinstance(value, _SCALAR_TYPES):
            return value
        if isinstance(value, str):
            return sanitize_string(value)

        if isinstance(value, (Mapping, list, tuple)):
            if depth >= max_depth:
                if overflow == "reject":
                    raise SanitizationDepthError(max_depth)
                truncated += 1
                return None
            if isinstance(value, Mapping):
                result = {}
                for key, item in value.items():
                    if isinstance(key, str):
                        key = sanitize_string(key)
                    if key in result:
                        raise SanitizationKeyConflictError(key)
                    result[key] = walk(item, depth + 1)
                return result
            return [walk(item, depth + 1) for item in value]

        # Anything else is not JSON; store its text form
        return sanitize_string(str(value))

    sanitized = walk(data, 0)

    if truncated:
        logger.warning(f"Truncated {truncated} values nested deeper than {max_depth} levels")

    return sanitized
