"""Plain-text renderers for the terminal. No HTML, no emoji, no timestamps."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from terminal_ai.api.config import FULL_TEXT_MAX_CHARS, MAX_CASE_RECORDS, MAX_HIGHLIGHTS
from terminal_ai.api.services.case_search import CaseRecord, LookupResult

TRUNCATED_MARKER = "[truncated]"

_RECORD_FIELDS = (
    ("Court", "court_name"),
    ("Form", "form"),
    ("Date", "date"),
    ("Case number", "number"),
    ("Summary", "summary"),
)


def truncate_text(text: str, budget: int = FULL_TEXT_MAX_CHARS) -> str:
    if len(text) <= budget:
        return text
    return text[:budget] + TRUNCATED_MARKER


def _format_record(index: int, record: CaseRecord) -> list[str]:
    lines = [f"{index}. Decision {record.id}" if record.id else f"{index}. Decision"]
    for label, attr in _RECORD_FIELDS:
        value: Optional[str] = getattr(record, attr)
        if value:
            lines.append(f"   {label}: {value}")
    return lines


def format_case_results(result: LookupResult, combined_query: str, phrases: Sequence[str]) -> str:
    """
    Render a court search result block.

    Same input always yields the same text; the result is never modified.
    """
    lines = [
        "COURT DECISION SEARCH",
        f"Query: {combined_query}",
        f"Total found: {result.total_count}",
        "",
        "Search phrases:",
    ]
    lines.extend(f"  {i}. {p}" for i, p in enumerate(phrases, start=1))
    lines.append("")

    if not result.items:
        lines.append("No results found for this query. Try different wording.")
        return "\n".join(lines)

    lines.append("Decisions:")
    for i, record in enumerate(result.items[:MAX_CASE_RECORDS], start=1):
        lines.extend(_format_record(i, record))
    lines.append("")

    if result.full_text:
        lines.append("Full text of the first decision:")
        lines.append(truncate_text(result.full_text))
        lines.append("")

    if result.highlights:
        lines.append("Highlights:")
        lines.extend(f"  - {h}" for h in result.highlights[:MAX_HIGHLIGHTS])

    return "\n".join(lines).rstrip()


def render_rephrase_message() -> str:
    return (
        "SEARCH: no searchable legal terms found in your request.\n"
        "Please rephrase using specific terms, e.g. \"спадщина\", \"виселення\", "
        "\"номера справ\", \"тцк\"."
    )


def render_empty_command() -> str:
    return "Please enter a command."


def render_completion_error(exc: BaseException) -> str:
    return f"ERROR: AI service unavailable ({exc}). Please try again later."


def render_tcc_info() -> str:
    return (
        "TCC (ТЦК) - territorial recruitment centres.\n"
        "To search for TCC-related court cases, include a lookup keyword such as "
        "\"найди\", \"список\", \"дело\" or \"номер\" in your request."
    )


def format_motd(motds: Mapping[str, str]) -> str:
    if not motds:
        return "MOTD: no messages available."
    return "\n".join(f"[{lang.upper()}] {text}" for lang, text in motds.items())
