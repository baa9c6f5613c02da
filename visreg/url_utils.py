"""Shared URL utilities: join page paths to base URLs and derive artifact names."""

from __future__ import annotations

from urllib.parse import urljoin


def join_url(base_url: str, page_path: str) -> str:
    """Join a logical page path onto an environment base URL."""
    return base_url.rstrip("/") + "/" + page_path.lstrip("/")


def resolve_url(url: str, base_url: str) -> str:
    """Return ``url`` unchanged if absolute, otherwise resolve it against ``base_url``."""
    if url.startswith(("http://", "https://")):
        return url
    return join_url(base_url, url)


def resolve_asset_url(src: str, page_url: str) -> str:
    """Resolve an asset reference (relative, root-relative or protocol-relative)."""
    if src.startswith("//"):
        return f"https:{src}"
    return urljoin(page_url, src)


def sanitize_path(page_path: str) -> str:
    """Flatten a page path into a filename stem: every ``/`` becomes ``_``."""
    return page_path.replace("/", "_")


def screenshot_filename(page_path: str) -> str:
    return f"{sanitize_path(page_path)}.png"
