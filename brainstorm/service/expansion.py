"""
Expansion service for deriving a new idea from an existing one.

Responsibilities:
- Send a node's text to the remote suggestion endpoint
- Return the suggestion, or None when the endpoint had no suggestion
- Raise ExpansionError for any transport, timeout, status or payload failure

Falling back to a local suggestion is a caller policy, not something
ExpansionService does on its own. FallbackExpansionService composes a primary
and a fallback source for callers that opt in.
"""

import logging
import random
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


DEFAULT_ENDPOINT_PATH = "/api/ai/expand"
DEFAULT_TIMEOUT = 10.0  # HTTP request timeout in seconds


class ExpansionError(Exception):
    """Recoverable failure of an expansion request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ExpansionService:
    """
    Client for the remote suggestion endpoint.

    The endpoint receives ``{"text": ...}`` and answers with
    ``{"suggestion": ...}``.

    Args:
        base_url: Scheme and host of the suggestion server
        endpoint_path: Path of the expand endpoint
        timeout: HTTP request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        endpoint_path: str = DEFAULT_ENDPOINT_PATH,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.endpoint_path = endpoint_path
        self._timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint_path}"

    async def expand(self, text: str) -> Optional[str]:
        """
        Ask the remote endpoint for a suggestion related to text.

        Returns:
            The suggestion text, or None if the response carried no suggestion

        Raises:
            ExpansionError: on any failure of the request
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    json={"text": text},
                    headers={"User-Agent": "Brainstorm-Expansion/1.0"},
                )
        except httpx.TimeoutException as e:
            raise ExpansionError("Request timed out") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ExpansionError(str(e) or type(e).__name__) from e

        if not response.is_success:
            raise ExpansionError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ExpansionError(
                f"Invalid JSON in response: {e}",
                status_code=response.status_code,
            ) from e

        suggestion = payload.get("suggestion") if isinstance(payload, dict) else None
        if suggestion is None or suggestion == "":
            logger.info(f"No suggestion returned for '{text[:50]}'")
            return None
        if not isinstance(suggestion, str):
            raise ExpansionError(
                f"Expected a string suggestion, got {type(suggestion).__name__}",
                status_code=response.status_code,
            )
        return suggestion


# Templates for locally generated suggestions
SUGGESTION_TEMPLATES = [
    "{text}: what is the smallest first step?",
    "{text}: who would benefit most?",
    "{text}: what could go wrong?",
    "{text}: how would we measure success?",
    "{text}: what is the opposite approach?",
    "{text} for a completely different audience",
    "Combine {text} with something familiar",
]


class LocalSuggestionGenerator:
    """
    Produces suggestions without any network access.

    Used to serve the local expand endpoint and as the fallback source of
    FallbackExpansionService. Deterministic for a seeded random source.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def suggest(self, text: str) -> Optional[str]:
        text = (text or "").strip()
        if not text:
            return None
        return self._rng.choice(SUGGESTION_TEMPLATES).format(text=text)

    async def expand(self, text: str) -> Optional[str]:
        return self.suggest(text)


class FallbackExpansionService:
    """
    Expansion with an explicit fallback policy.

    Tries the primary source first; if it raises ExpansionError the fallback
    source answers instead. Errors raised by the fallback propagate.
    """

    def __init__(self, primary, fallback):
        self.primary = primary
        self.fallback = fallback

    async def expand(self, text: str) -> Optional[str]:
        try:
            return await self.primary.expand(text)
        except ExpansionError as e:
            logger.warning(f"Expansion failed, using local fallback: {e}")
            return await self.fallback.expand(text)
