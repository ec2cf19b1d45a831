from __future__ import annotations

from urllib.parse import quote, urlsplit

DICEBEAR_URL = "https://api.dicebear.com/9.x/initials/svg"


def is_allowed_return_url(url: str, allowed_origin: str, request_origin: str | None = None) -> bool:
    """Checkout return URLs must be absolute http(s) URLs on the configured or requesting origin."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return False
    origin = f"{parts.scheme}://{parts.netloc}"

    allowed = {o.strip().rstrip("/") for o in (allowed_origin or "").split(",") if o.strip()}
    if "*" in allowed:
        allowed.discard("*")
        if request_origin:
            allowed.add(request_origin.rstrip("/"))
        else:
            return True
    return origin in allowed


def safe_next_path(next_param: str | None) -> str | None:
    if not next_param:
        return None
    if "://" in next_param or next_param.startswith("//"):
        return None
    if not next_param.endswith(".html"):
        return None
    return next_param


def safe_http_url(value: str | None) -> str:
    raw = (value or "").strip()
    if not raw:
        return ""
    try:
        parts = urlsplit(raw)
    except ValueError:
        return ""
    if parts.scheme in ("http", "https") and parts.netloc:
        return raw
    return ""


def avatar_from_seed(seed: str | None) -> str:
    clean = (seed or "").strip()
    if not clean:
        return ""
    return f"{DICEBEAR_URL}?seed={quote(clean, safe='')}&backgroundColor=d8bb9a,2b1a12&textColor=0e0604"
