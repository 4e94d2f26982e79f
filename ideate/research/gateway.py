"""Cache-first research: knowledge base lookup, then Brave Search on a miss."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ideate.config import settings
from ideate.errors import SearchError
from ideate.knowledge.models import KnowledgeEntry
from ideate.knowledge.store import KnowledgeStore, is_exact_hit
from ideate.research.brave import BraveSearchClient

if TYPE_CHECKING:
    from ideate.context.models import ConversationContext
    from ideate.research.brave import SearchResult

logger = logging.getLogger(__name__)

SUMMARY_DESCRIPTION_CHARS = 200
DIGEST_RESULTS = 3


@dataclass
class ResearchResult:
    """Outcome of one research request.

    Attributes:
        query: The query that was researched.
        digest: Compact text for prompt injection.
        source: ``"cache"``, ``"brave"`` or ``"none"`` (no fresh results).
        summary: Per-result summary lines (empty for ``"none"``).
        related_queries: Provider suggestions for follow-up searches.
    """

    query: str
    digest: str
    source: str
    summary: str = ""
    related_queries: list[str] = field(default_factory=list)

    @property
    def cached(self) -> bool:
        return self.source == "cache"


def summarize_results(results: list[SearchResult]) -> str:
    """One ``[n] title: description`` line per result, descriptions truncated."""
    return "\n".join(
        f"[{i}] {r.title}: {r.description[:SUMMARY_DESCRIPTION_CHARS]}"
        for i, r in enumerate(results, start=1)
    )


def build_ai_digest(query: str, results: list[SearchResult]) -> str:
    """Bulleted digest of the top results' titles and first-sentence insight."""
    points = []
    for r in results[:DIGEST_RESULTS]:
        insight = r.description.split(".")[0] or r.description[:100]
        points.append(f"• {r.title}: {insight}")
    return f"TOPIC: {query}\nKEY INSIGHTS:\n" + "\n".join(points)


def build_full_content(results: list[SearchResult]) -> str:
    return "\n\n---\n\n".join(f"{r.title}\n{r.url}\n{r.description}" for r in results)


class ResearchGateway:
    """Decides when to research and produces a digest for the prompt.

    Every failure (cache, provider, missing key) is logged and turns into
    ``None``; research never blocks a reply.
    """

    def __init__(
        self,
        knowledge: KnowledgeStore | None = None,
        search_client: BraveSearchClient | None = None,
    ) -> None:
        self._knowledge = knowledge or KnowledgeStore.get()
        self._search = search_client or BraveSearchClient()

    @staticmethod
    def should_research(stage: str, context: ConversationContext, turn_count: int) -> bool:
        """Only research mid-conversation, once the industry is known."""
        return (
            settings.research_enabled
            and stage == "exploration"
            and bool(context.industry)
            and turn_count > settings.research_min_turns
        )

    @staticmethod
    def build_query(context: ConversationContext) -> str:
        if context.pain_points:
            return f"{context.industry} AI {context.pain_points[0]}"
        return f"{context.industry} AI use cases"

    async def research(
        self,
        query: str,
        industry: str | None = None,
        context: str | None = None,
    ) -> ResearchResult | None:
        """Return cached or freshly searched knowledge for *query*."""
        query = query.strip()
        if not query:
            return None

        try:
            entries = await self._knowledge.lookup(query)
        except Exception:
            logger.exception("Knowledge lookup failed for %r", query)
            entries = []

        if is_exact_hit(entries, query):
            logger.info("Knowledge cache hit for %r", query)
            hit = entries[0]
            return ResearchResult(
                query=query,
                digest=hit.ai_optimized_content,
                source="cache",
                summary=hit.summary,
                related_queries=list(hit.metadata.get("related_queries", [])),
            )

        related = "\n\n".join(e.ai_optimized_content for e in entries if e.ai_optimized_content)

        logger.info("Knowledge cache miss for %r, searching", query)
        try:
            response = await self._search.search(query, count=settings.search_result_count)
        except SearchError as exc:
            logger.warning("Research search failed for %r: %s", query, exc)
            return None
        except Exception:
            logger.exception("Research search failed for %r", query)
            return None

        if not response.results:
            if not related:
                return None
            return ResearchResult(query=query, digest=related, source="none")

        summary = summarize_results(response.results)
        digest = build_ai_digest(query, response.results)

        entry = KnowledgeEntry(
            query=query,
            source_type="brave_search",
            content=build_full_content(response.results),
            summary=summary,
            ai_optimized_content=digest,
            metadata={
                "industry": industry,
                "context": context,
                "result_count": len(response.results),
                "related_queries": response.related_queries,
            },
        )
        try:
            await self._knowledge.store(entry)
        except Exception:
            logger.exception("Failed to cache research for %r", query)

        if related:
            digest = f"RELATED KNOWLEDGE:\n{related}\n\nNEW RESEARCH:\n{digest}"

        return ResearchResult(
            query=query,
            digest=digest,
            source="brave",
            summary=summary,
            related_queries=response.related_queries,
        )
