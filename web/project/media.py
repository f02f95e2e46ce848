from urllib.parse import urlparse

from django.conf import settings


def _is_absolute_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def build_media_url(raw_url: str | None) -> str | None:
    """Absolute URL for a CMS media path (thumbnails, galleries, downloads)."""
    if not raw_url:
        return None

    if raw_url.startswith("//"):
        return f"https:{raw_url}"

    if _is_absolute_url(raw_url):
        return raw_url

    suffix = raw_url if raw_url.startswith("/") else f"/{raw_url}"
    return f"{settings.API_BASE.rstrip('/')}{suffix}"
