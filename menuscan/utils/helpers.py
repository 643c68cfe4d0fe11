import math
import re
from typing import Any, Optional, Union
from urllib.parse import urlparse

from flask import current_app, request

_NUMBER_RE = re.compile(r"[-+]?\d+(\.\d+)?([eE][-+]?\d+)?")


def fnum(x: Any, default: Union[int, float] = 0) -> Union[int, float]:
    """Convert various formats to a finite-or-infinite number, with regex extraction for strings.

    Booleans, None, NaN and strings without a number map to `default`.
    Integral ints stay ints so sanitized output round-trips unchanged.
    """
    if isinstance(x, bool):
        return default
    if isinstance(x, int):
        return x
    if isinstance(x, float):
        return default if math.isnan(x) else x
    if isinstance(x, str):
        s = x.replace(",", "").strip()
        try:
            return int(s)
        except ValueError:
            pass
        try:
            v = float(s)
            return default if math.isnan(v) else v
        except ValueError:
            pass
        # Unit-suffixed text such as "300 kcal" or "1e3 kcal"
        m = _NUMBER_RE.search(s)
        if m:
            text = m.group(0)
            return float(text) if m.group(1) or m.group(2) else int(text)
    return default


def truncate_url(url: Optional[str], limit: int = 50) -> str:
    """Shorten URLs for log lines (signed URLs carry tokens)."""
    if not url:
        return ""
    return url if len(url) <= limit else url[:limit] + "..."


def is_allowed_image_url(url: str, allowed_hosts) -> bool:
    """https URL whose host equals or ends with one of the allowed host suffixes."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    host = (parsed.hostname or "").lower()
    if parsed.scheme != "https" or not host:
        return False
    return any(host == h or host.endswith("." + h) for h in allowed_hosts)


def get_user_id() -> Optional[str]:
    """Resolve the caller identity.

    Production requests carry the API Gateway authorizer claims in the
    serverless-wsgi event; the X-User-Id header is only honoured when
    TRUST_USER_ID_HEADER is enabled (local development and tests).
    """
    event = request.environ.get("serverless.event") or {}
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    claims = authorizer.get("claims") or (authorizer.get("jwt") or {}).get("claims") or {}
    sub = claims.get("sub")
    if sub:
        return str(sub)
    if current_app.config.get("TRUST_USER_ID_HEADER"):
        header = (request.headers.get("X-User-Id") or "").strip()
        return header or None
    return None
