"""Tool that fetches the body of a web page."""

import logging
from typing import Optional

import httpx

from .base import BaseTool

logger = logging.getLogger(__name__)


class HttpFetchTool(BaseTool):
    """GETs a URL and returns the (truncated) response text."""

    name = "http_fetch"
    description = "Fetches a URL over HTTP(S) and returns the response body as text"

    def __init__(
        self,
        timeout: float = 30.0,
        max_chars: int = 4000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.timeout = timeout
        self.max_chars = max_chars
        self._transport = transport

    async def _execute(self, input_text: str) -> str:
        url = input_text.strip()
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Not an http(s) URL: {url!r}")

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport, follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()

        text = response.text
        if len(text) > self.max_chars:
            logger.debug(f"Truncating {len(text)} chars from {url} to {self.max_chars}")
            text = text[: self.max_chars]
        return text
