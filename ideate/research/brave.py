"""Brave Search web API client."""

import logging

import httpx
from pydantic import BaseModel, Field

from ideate.config import settings
from ideate.errors import SearchConfigurationError, SearchError

logger = logging.getLogger(__name__)

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"
MAX_RESULT_COUNT = 5
MAX_RELATED_QUERIES = 3


class SearchResult(BaseModel):
    title: str = ""
    url: str = ""
    description: str = ""
    age: str | None = None


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResult] = Field(default_factory=list)
    related_queries: list[str] = Field(default_factory=list)
    total_results: int = 0


class BraveSearchClient:
    """Async wrapper around the Brave web search endpoint.

    The API key is read at call time, so a missing key only fails the
    search that needs it.
    """

    def __init__(self, api_key: str | None = None, timeout: float | None = None) -> None:
        self._api_key = api_key
        self._timeout = timeout or settings.search_timeout_seconds

    @property
    def api_key(self) -> str:
        return self._api_key if self._api_key is not None else settings.brave_search_api_key

    async def search(
        self,
        query: str,
        count: int = MAX_RESULT_COUNT,
        country: str | None = None,
        language: str | None = None,
    ) -> SearchResponse:
        """Run one web search.

        Raises:
            SearchConfigurationError: BRAVE_SEARCH_API_KEY is not set.
            SearchError: Non-200 response or transport failure (including timeout).
        """
        api_key = self.api_key
        if not api_key:
            raise SearchConfigurationError("BRAVE_SEARCH_API_KEY is not configured.")

        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "X-Subscription-Token": api_key,
        }
        params = {
            "q": query,
            "count": max(1, min(count, MAX_RESULT_COUNT)),
            "country": country or settings.search_country,
            "search_lang": language or settings.search_language,
            "safesearch": "moderate",
            "text_decorations": "false",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(BRAVE_SEARCH_URL, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise SearchError(f"Search request failed: {exc}") from exc

        if resp.status_code != 200:
            raise SearchError(f"Brave Search API returned {resp.status_code}: {resp.text[:200]}")

        data = resp.json()
        web = data.get("web") or {}
        results = [
            SearchResult(
                title=r.get("title") or "",
                url=r.get("url") or "",
                description=r.get("description") or "",
                age=r.get("age"),
            )
            for r in web.get("results", [])
        ]
        related = (data.get("query") or {}).get("related") or []

        logger.info("Brave Search returned %d result(s) for %r", len(results), query)
        return SearchResponse(
            query=query,
            results=results,
            related_queries=[str(q) for q in related[:MAX_RELATED_QUERIES]],
            total_results=web.get("total_results") or len(results),
        )
