"""
Resolution pipeline for free-text commands the terminal cannot handle itself.

Decision list, first match wins:
  tcc         recruitment-office keyword plus an administrative term
  court_case  completion-backed YES/NO classifier
  legal       keyword/pattern legal intent
  generic     everything else
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple

from terminal_ai.api.config import OLLAMA_MODEL_LEGAL, OLLAMA_MODEL_SYS
from terminal_ai.api.services import ollama_client
from terminal_ai.api.services.cache import TTLCache, ai_key
from terminal_ai.api.services.cache import cache as shared_cache
from terminal_ai.api.services.case_search import NoExtractableQuery, search_cases
from terminal_ai.api.services.case_search_client import CaseSearchError, ZakonOnlineClient
from terminal_ai.api.services.court_case_intent import classify_court_case_request
from terminal_ai.api.services.formatter import (
    format_case_results,
    render_completion_error,
    render_empty_command,
    render_rephrase_message,
    render_tcc_info,
)
from terminal_ai.api.services.intent import (
    ClassificationResult,
    classify_legal_request,
    is_tcc_request,
    language_name,
    wants_case_lookup,
)
from terminal_ai.api.services.ollama_client import CompletionRequest, OllamaError
from terminal_ai.api.services.prompts import (
    CASE_LAW_FALLBACK_PROMPT,
    GENERIC_TERMINAL_PROMPT,
    TCC_PROMPT,
    legal_database_prompt,
    legal_prompt,
)
from terminal_ai.api.services.request_sink import RequestSink, record_safely
from terminal_ai.api.services.request_sink import request_sink as shared_sink
from terminal_ai.api.services.router import Route, first_matching_route

logger = logging.getLogger(__name__)

Completer = Callable[[CompletionRequest], Awaitable[str]]

# --- Request kinds (also the RequestSink tags) ---
KIND_UNKNOWN_COMMAND = "unknown_command"
KIND_LEGAL = "legal_request"
KIND_COURT_CASE = "court_case_numbers_request"
KIND_TCC = "tcc_request"
KIND_CASE_SEARCH = "case_search"
KIND_LEGAL_DATABASE = "legal_database_search"

_COMPLETION_TTLS: Dict[str, int] = {
    KIND_UNKNOWN_COMMAND: 600,
    KIND_LEGAL: 1800,
    KIND_COURT_CASE: 3600,
    KIND_TCC: 3600,
    KIND_LEGAL_DATABASE: 1800,
}

_SEARCHABLE_LANGUAGES = ("uk", "ru")


class CommandOrchestrator:
    def __init__(
        self,
        complete: Optional[Completer] = None,
        search_client: Optional[ZakonOnlineClient] = None,
        cache: Optional[TTLCache] = None,
        sink: Optional[RequestSink] = None,
    ):
        self._complete: Completer = complete or ollama_client.complete
        self._search_client = search_client or ZakonOnlineClient()
        self._cache = cache if cache is not None else shared_cache
        self._sink = sink if sink is not None else shared_sink

        self.routes: Tuple[Route, ...] = (
            Route("tcc", is_tcc_request, self.handle_tcc),
            Route("court_case", self.is_court_case_request, self.handle_court_case),
            Route("legal", lambda text: classify_legal_request(text).matched, self.handle_legal),
            Route("generic", lambda _text: True, self.handle_generic),
        )

    @property
    def search_client(self) -> ZakonOnlineClient:
        return self._search_client

    @property
    def sink(self) -> RequestSink:
        return self._sink

    @property
    def cache(self) -> TTLCache:
        return self._cache

    # ----------------------------
    # Entry point
    # ----------------------------
    async def resolve(self, command_text: str, is_admin: bool = False) -> str:
        """
        Answer one free-text command.

        is_admin is accepted for future authorization rules and does not
        change any prompt. Only cancellation escapes; every other failure is
        rendered as a terminal error line.
        """
        text = (command_text or "").strip()
        if not text:
            return render_empty_command()

        try:
            route = await first_matching_route(self.routes, text)
            logger.info(
                "command_routed",
                extra={"route": route.name if route else None, "is_admin": is_admin, "chars": len(text)},
            )
            if route is None:
                return await self.handle_generic(text)
            return await route.handler(text)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("command_failed", extra={"error_type": type(exc).__name__})
            return render_completion_error(exc)

    # ----------------------------
    # Guards
    # ----------------------------
    async def is_court_case_request(self, text: str) -> bool:
        return await classify_court_case_request(text, self._complete, self._cache)

    # ----------------------------
    # Handlers
    # ----------------------------
    async def handle_tcc(self, text: str) -> str:
        if not wants_case_lookup(text):
            return render_tcc_info()

        request = CompletionRequest(
            system_prompt=TCC_PROMPT,
            user_text=text,
            max_output_tokens=1000,
            temperature=0.3,
            model=OLLAMA_MODEL_LEGAL,
        )
        return await self._complete_and_record(KIND_TCC, text, request)

    async def handle_court_case(self, text: str) -> str:
        if not self._search_client.is_configured():
            logger.info("case_search_not_configured")
            return await self._case_law_completion(text)

        try:
            outcome = await search_cases(text, self._search_client, self._cache)
        except NoExtractableQuery:
            logger.info("case_search_no_phrases")
            return render_rephrase_message()
        except CaseSearchError as exc:
            logger.warning(
                "case_search_failed",
                extra={"error": str(exc), "code": exc.code},
            )
            return await self._case_law_completion(text)

        rendered = format_case_results(outcome.result, outcome.combined_query, outcome.phrases)
        record_safely(self._sink, KIND_CASE_SEARCH, text, rendered)
        return rendered

    async def handle_legal(self, text: str) -> str:
        language = classify_legal_request(text).language
        request = CompletionRequest(
            system_prompt=legal_prompt(language),
            user_text=text,
            max_output_tokens=1000,
            temperature=0.3,
            model=OLLAMA_MODEL_LEGAL,
        )
        return await self._complete_and_record(KIND_LEGAL, text, request)

    async def handle_generic(self, text: str) -> str:
        request = CompletionRequest(
            system_prompt=GENERIC_TERMINAL_PROMPT,
            user_text=text,
            max_output_tokens=500,
            temperature=0.7,
            model=OLLAMA_MODEL_SYS,
        )
        return await self._complete_and_record(KIND_UNKNOWN_COMMAND, text, request)

    async def search_legal_database(self, query: str, language: str) -> str:
        """Court search for uk/ru when available, otherwise a language-bound completion."""
        text = (query or "").strip()
        lang = (language or "en").lower()

        if lang in _SEARCHABLE_LANGUAGES and self._search_client.is_configured():
            try:
                outcome = await search_cases(text, self._search_client, self._cache)
            except NoExtractableQuery:
                return render_rephrase_message()
            except CaseSearchError as exc:
                logger.warning("legal_database_search_failed", extra={"error": str(exc), "code": exc.code})
            else:
                rendered = format_case_results(outcome.result, outcome.combined_query, outcome.phrases)
                record_safely(self._sink, KIND_LEGAL_DATABASE, text, rendered)
                return rendered

        request = CompletionRequest(
            system_prompt=legal_database_prompt(language_name(lang)),
            user_text=text,
            max_output_tokens=1000,
            temperature=0.3,
            model=OLLAMA_MODEL_LEGAL,
        )
        return await self._complete_and_record(KIND_LEGAL_DATABASE, text, request, cache_kind=f"legal_db_{lang}")

    # ----------------------------
    # Completion plumbing
    # ----------------------------
    async def _case_law_completion(self, text: str) -> str:
        request = CompletionRequest(
            system_prompt=CASE_LAW_FALLBACK_PROMPT,
            user_text=text,
            max_output_tokens=1000,
            temperature=0.3,
            model=OLLAMA_MODEL_LEGAL,
        )
        return await self._complete_and_record(KIND_COURT_CASE, text, request)

    async def _complete_and_record(
        self,
        kind: str,
        text: str,
        request: CompletionRequest,
        cache_kind: Optional[str] = None,
    ) -> str:
        async def _compute() -> str:
            return await self._complete(request)

        try:
            answer = await self._cache.get_or_set(
                ai_key(text, cache_kind or kind),
                _compute,
                _COMPLETION_TTLS.get(kind),
            )
        except OllamaError as exc:
            logger.error("completion_failed", extra={"kind": kind, "error": str(exc), "code": exc.code})
            return render_completion_error(exc)

        record_safely(self._sink, kind, text, answer)
        return answer


# ============================
# Module-level entry points
# ============================
_default_orchestrator: Optional[CommandOrchestrator] = None


def get_orchestrator() -> CommandOrchestrator:
    global _default_orchestrator
    if _default_orchestrator is None:
        _default_orchestrator = CommandOrchestrator()
    return _default_orchestrator


async def process_unknown_command(command_text: str, is_admin: bool = False) -> str:
    return await get_orchestrator().resolve(command_text, is_admin)


async def detect_legal_request(query: str) -> ClassificationResult:
    return classify_legal_request(query)


async def search_legal_database(query: str, language: str) -> str:
    orchestrator = get_orchestrator()
    try:
        return await orchestrator.search_legal_database(query, language)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("legal_database_failed")
        return render_completion_error(exc)


async def process_court_case_request(query: str) -> str:
    orchestrator = get_orchestrator()
    try:
        return await orchestrator.handle_court_case((query or "").strip())
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("court_case_request_failed")
        return render_completion_error(exc)


async def process_tcc_request(query: str) -> str:
    orchestrator = get_orchestrator()
    try:
        return await orchestrator.handle_tcc((query or "").strip())
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("tcc_request_failed")
        return render_completion_error(exc)
