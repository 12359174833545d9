"""Two-stage court-decision lookup: metadata search, then full text of the top hit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from terminal_ai.api.config import MAX_CASE_RECORDS, ZAKON_PAGE_SIZE
from terminal_ai.api.services.cache import TTLCache, ai_key
from terminal_ai.api.services.case_search_client import ZakonOnlineClient
from terminal_ai.api.services.query_extraction import SearchQuerySet, combine_queries, extract_search_queries

logger = logging.getLogger(__name__)

SEARCH_TTL_SECS = 300


class NoExtractableQuery(ValueError):
    """The text contains no searchable domain phrase."""


@dataclass(frozen=True)
class CaseRecord:
    id: Optional[str] = None
    court_name: Optional[str] = None
    form: Optional[str] = None
    date: Optional[str] = None
    number: Optional[str] = None
    summary: Optional[str] = None


@dataclass(frozen=True)
class LookupResult:
    items: Tuple[CaseRecord, ...] = ()
    total_count: int = 0
    full_text: Optional[str] = None
    highlights: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CaseSearchOutcome:
    phrases: SearchQuerySet
    combined_query: str
    result: LookupResult


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_record(raw: Dict[str, Any]) -> CaseRecord:
    return CaseRecord(
        id=_opt_str(raw.get("id")),
        court_name=_opt_str(raw.get("courtName")),
        form=_opt_str(raw.get("judgmentForm")),
        date=_opt_str(raw.get("date")),
        number=_opt_str(raw.get("number")),
        summary=_opt_str(raw.get("summary")),
    )


def _parse_total(meta: Dict[str, Any], item_count: int) -> int:
    try:
        return int(meta.get("totalCount", item_count))
    except (TypeError, ValueError):
        return item_count


async def _lookup(client: ZakonOnlineClient, combined: str) -> LookupResult:
    meta = await client.search_metadata_async(combined, page=1, page_size=ZAKON_PAGE_SIZE)

    raw_items = meta.get("items") or []
    items = tuple(_parse_record(r) for r in raw_items[:MAX_CASE_RECORDS] if isinstance(r, dict))
    if not items:
        return LookupResult(items=(), total_count=0)

    total = _parse_total(meta, len(items))

    full_text: Optional[str] = None
    highlights: Tuple[str, ...] = ()
    first_id = items[0].id
    if first_id:
        details = await client.get_full_text_async(first_id, combined)
        full_text = _opt_str(details.get("fullText"))
        highlights = tuple(
            h["text"]
            for h in (details.get("highlights") or [])
            if isinstance(h, dict) and h.get("text")
        )

    return LookupResult(items=items, total_count=total, full_text=full_text, highlights=highlights)


async def search_cases(raw_query: str, client: ZakonOnlineClient, cache: TTLCache) -> CaseSearchOutcome:
    """
    Extract search phrases from raw_query and look them up.

    Raises NoExtractableQuery before any network call when nothing is
    searchable. Transport and status failures surface as CaseSearchError.
    An empty hit list is a normal result, not an error.
    """
    phrases = extract_search_queries(raw_query)
    if not phrases:
        raise NoExtractableQuery(raw_query)

    combined = combine_queries(phrases)
    logger.info("case_search", extra={"phrases": list(phrases), "combined_query": combined})

    async def _compute() -> LookupResult:
        return await _lookup(client, combined)

    result = await cache.get_or_set(ai_key(combined, "case_search"), _compute, SEARCH_TTL_SECS)
    return CaseSearchOutcome(phrases=phrases, combined_query=combined, result=result)
