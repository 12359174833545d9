from terminal_ai.api.config import FULL_TEXT_MAX_CHARS
from terminal_ai.api.services.case_search import CaseRecord, LookupResult
from terminal_ai.api.services.formatter import (
    TRUNCATED_MARKER,
    format_case_results,
    format_motd,
    render_completion_error,
    render_rephrase_message,
    render_tcc_info,
    truncate_text,
)
from terminal_ai.api.services.ollama_client import OllamaTimeoutError

PHRASES = ("спадщина", "суд")
COMBINED = "спадщина AND суд"


def _record(i, **overrides):
    fields = {
        "id": f"id-{i}",
        "court_name": f"Court {i}",
        "form": "Рішення",
        "date": "2023-01-0%d" % (i % 9 + 1),
        "number": f"{i}/2023",
        "summary": f"Summary {i}",
    }
    fields.update(overrides)
    return CaseRecord(**fields)


# --- Result rendering ---


def test_format_lists_header_phrases_and_records():
    # === Arrange ===
    result = LookupResult(
        items=(_record(1), _record(2)),
        total_count=17,
        full_text="Повний текст рішення",
        highlights=("перший фрагмент",),
    )

    # === Act ===
    out = format_case_results(result, COMBINED, PHRASES)

    # === Assert ===
    assert "Total found: 17" in out
    assert f"Query: {COMBINED}" in out
    assert "1. спадщина" in out
    assert "2. суд" in out
    assert "Court: Court 1" in out
    assert "Case number: 2/2023" in out
    assert "Повний текст рішення" in out
    assert "- перший фрагмент" in out
    assert TRUNCATED_MARKER not in out


def test_format_is_idempotent():
    result = LookupResult(items=(_record(1),), total_count=1, full_text="x" * 5000, highlights=("h",))

    assert format_case_results(result, COMBINED, PHRASES) == format_case_results(result, COMBINED, PHRASES)


def test_blank_fields_are_omitted():
    result = LookupResult(items=(_record(1, form=None, summary=""),), total_count=1)

    out = format_case_results(result, COMBINED, PHRASES)

    assert "Form:" not in out
    assert "Summary:" not in out
    assert "None" not in out
    assert "Court: Court 1" in out


def test_no_results_has_no_enumeration():
    # === Act ===
    out = format_case_results(LookupResult(), COMBINED, PHRASES)

    # === Assert ===
    assert "No results found" in out
    assert "Total found: 0" in out
    assert "Decisions:" not in out
    assert "Court:" not in out


def test_long_full_text_is_truncated_to_budget_plus_marker():
    # === Arrange ===
    full_text = "x" * (FULL_TEXT_MAX_CHARS + 500)
    result = LookupResult(items=(_record(1),), total_count=1, full_text=full_text)

    # === Act ===
    out = format_case_results(result, COMBINED, PHRASES)
    truncated = truncate_text(full_text)

    # === Assert ===
    assert truncated == "x" * FULL_TEXT_MAX_CHARS + TRUNCATED_MARKER
    assert len(truncated) == FULL_TEXT_MAX_CHARS + len(TRUNCATED_MARKER)
    assert truncated in out
    assert "x" * (FULL_TEXT_MAX_CHARS + 1) not in out


def test_text_at_budget_is_not_marked():
    text = "y" * FULL_TEXT_MAX_CHARS

    assert truncate_text(text) == text


def test_records_and_highlights_are_capped_at_five():
    result = LookupResult(
        items=tuple(_record(i) for i in range(1, 8)),
        total_count=7,
        highlights=tuple(f"highlight-{i}" for i in range(1, 8)),
    )

    out = format_case_results(result, COMBINED, PHRASES)

    assert "Court: Court 5" in out
    assert "Court: Court 6" not in out
    assert "highlight-5" in out
    assert "highlight-6" not in out


def test_format_does_not_mutate_result():
    result = LookupResult(items=(_record(1),), total_count=1, full_text="z" * 3000)

    format_case_results(result, COMBINED, PHRASES)

    assert result.full_text == "z" * 3000


# --- Fixed messages ---


def test_fixed_messages():
    assert "rephrase" in render_rephrase_message()
    assert "найди" in render_tcc_info()
    assert "timed out" in render_completion_error(OllamaTimeoutError("request timed out"))


def test_format_motd():
    out = format_motd({"en": "Bite my shiny metal shell.", "uk": "Привіт"})

    assert out.splitlines() == ["[EN] Bite my shiny metal shell.", "[UK] Привіт"]
    assert "no messages" in format_motd({})
