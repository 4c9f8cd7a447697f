from __future__ import annotations

from urllib.parse import quote, urljoin


class BaseUrlMediaResolver:
    """Resolve stored media keys against a public base URL.

    Absolute references are returned as they are.
    """

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url.rstrip("/") + "/"

    async def resolve(self, reference: str) -> str:
        if reference.startswith(("http://", "https://")):
            return reference
        return urljoin(self._base_url, quote(reference.lstrip("/")))
