"""
Serper web-search client.
POSTs a query to google.serper.dev and condenses the response into a short
text block the model can cite.
"""
import logging
from typing import Optional

import httpx

from config import settings
from models.search import SearchResponse

logger = logging.getLogger(__name__)

TOP_RESULTS = 3


class SearchServiceError(RuntimeError):
    pass


class SearchClient:
    """Thin client for the Serper search API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        api_key = api_key if api_key is not None else settings.SERPER_API_KEY
        if not api_key:
            raise ValueError("Serper API key is required")
        self.url = url or settings.SERPER_URL
        self.client = httpx.Client(
            timeout=30,
            headers={"X-API-KEY": api_key, "Content-Type": "application/json"},
            transport=transport,
        )

    def search(self, query: str) -> SearchResponse:
        payload = {"q": query, "gl": settings.SEARCH_COUNTRY, "hl": settings.SEARCH_LANGUAGE}
        logger.info("Web search: %s", query[:80])
        try:
            resp = self.client.post(self.url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise SearchServiceError(f"Failed to fetch search results: {e}") from e
        return SearchResponse.model_validate(resp.json())

    @staticmethod
    def summarize_results(results: SearchResponse) -> str:
        """Knowledge-graph facts first, then the snippets of the top organic hits."""
        lines: list[str] = []
        kg = results.knowledge_graph
        if kg:
            lines.append(f"{kg.title}: {kg.description or ''}")
            lines.append("")
            if kg.attributes:
                lines.extend(f"{key}: {value}" for key, value in kg.attributes.items())
                lines.append("")
        if results.organic:
            lines.append("Top Results:")
            lines.extend(f"- {r.snippet}" for r in results.organic[:TOP_RESULTS])
        return "\n".join(lines).strip()

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()
