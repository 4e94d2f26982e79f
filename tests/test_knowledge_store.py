"""Tests for the knowledge cache and its query hash."""

import pytest

from ideate.knowledge.models import KnowledgeEntry, hash_query
from ideate.knowledge.store import KnowledgeStore, is_exact_hit

pytestmark = pytest.mark.usefixtures("_no_turso")


def _entry(query: str, summary: str = "", use_count: int = 1) -> KnowledgeEntry:
    return KnowledgeEntry(
        query=query,
        summary=summary,
        content=f"content for {query}",
        ai_optimized_content=f"TOPIC: {query}",
        metadata={"industry": "retail", "result_count": 2},
        use_count=use_count,
    )


# -- hash_query ----------------------------------------------------------------


def test_hash_normalizes_case_and_whitespace() -> None:
    assert hash_query("Healthcare AI") == hash_query("healthcare ai ")
    assert hash_query("  RETAIL ai manual data entry") == hash_query("retail AI manual data entry")


def test_hash_is_deterministic_hex() -> None:
    h = hash_query("retail ai")
    assert h == hash_query("retail ai")
    int(h, 16)


def test_hash_known_values() -> None:
    assert hash_query("") == "0"
    assert hash_query("a") == "61"
    assert hash_query("ab") == format(97 * 31 + 98, "x")


def test_hash_wraps_to_signed_32_bits() -> None:
    value = int(hash_query("a fairly long query that overflows thirty two bits"), 16)
    assert -(2**31) <= value < 2**31


def test_entry_computes_hash_from_query() -> None:
    entry = KnowledgeEntry(query="Retail AI")
    assert entry.query_hash == hash_query("retail ai")


# -- lookup / store ------------------------------------------------------------


async def test_lookup_empty_store(knowledge_store: KnowledgeStore) -> None:
    assert await knowledge_store.lookup("retail ai") == []


async def test_exact_hit_increments_use_count(knowledge_store: KnowledgeStore) -> None:
    await knowledge_store.store(_entry("retail AI manual data entry"))

    first = await knowledge_store.lookup("Retail AI manual data entry ")
    assert len(first) == 1
    assert is_exact_hit(first, "retail ai manual data entry")
    assert first[0].use_count == 2

    second = await knowledge_store.lookup("retail ai manual data entry")
    assert second[0].use_count == 3
    assert second[0].last_accessed_at >= first[0].last_accessed_at
    assert second[0].metadata == {"industry": "retail", "result_count": 2}


async def test_related_matches_query_and_summary(knowledge_store: KnowledgeStore) -> None:
    await knowledge_store.store(_entry("retail AI forecasting", use_count=1))
    await knowledge_store.store(_entry("inventory tools", summary="Retail AI vendors", use_count=5))
    await knowledge_store.store(_entry("healthcare triage"))

    related = await knowledge_store.lookup("retail ai")

    assert not is_exact_hit(related, "retail ai")
    assert [e.query for e in related] == ["inventory tools", "retail AI forecasting"]


async def test_related_does_not_bump_use_count(knowledge_store: KnowledgeStore) -> None:
    await knowledge_store.store(_entry("retail AI forecasting"))

    await knowledge_store.lookup("retail")
    related = await knowledge_store.lookup("retail")

    assert related[0].use_count == 1


async def test_related_capped_at_three(knowledge_store: KnowledgeStore) -> None:
    for i in range(5):
        await knowledge_store.store(_entry(f"logistics AI topic {i}", use_count=i + 1))

    related = await knowledge_store.lookup("logistics")

    assert len(related) == 3
    assert [e.use_count for e in related] == [5, 4, 3]


async def test_store_keeps_distinct_queries_separate(knowledge_store: KnowledgeStore) -> None:
    await knowledge_store.store(_entry("retail AI"))
    await knowledge_store.store(_entry("retail AI pricing"))

    exact = await knowledge_store.lookup("retail ai pricing")
    assert len(exact) == 1
    assert exact[0].query == "retail AI pricing"


async def test_duplicate_inserts_are_tolerated(knowledge_store: KnowledgeStore) -> None:
    await knowledge_store.store(_entry("retail AI"))
    await knowledge_store.store(_entry("retail AI"))

    hit = await knowledge_store.lookup("retail ai")
    assert len(hit) == 1
    assert is_exact_hit(hit, "retail ai")


def test_is_exact_hit_empty() -> None:
    assert not is_exact_hit([], "anything")
