"""LLM-backed yes/no detector for "give me case numbers" requests."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from terminal_ai.api.config import OLLAMA_MODEL_SYS
from terminal_ai.api.services.cache import TTLCache, ai_key
from terminal_ai.api.services.ollama_client import CompletionRequest
from terminal_ai.api.services.prompts import COURT_CASE_CLASSIFIER_PROMPT

logger = logging.getLogger(__name__)

Completer = Callable[[CompletionRequest], Awaitable[str]]

_VERDICT_TTL_SECS = 3600
_MAX_OUTPUT_TOKENS = 10
_TEMPERATURE = 0.1


def parse_verdict(answer: str) -> bool:
    return (answer or "").strip().upper() == "YES"


async def classify_court_case_request(text: str, complete: Completer, cache: TTLCache) -> bool:
    """
    Ask the completion service whether text wants court case numbers.

    Advisory only: any failure is logged and treated as "no".
    """
    request = CompletionRequest(
        system_prompt=COURT_CASE_CLASSIFIER_PROMPT,
        user_text=text,
        max_output_tokens=_MAX_OUTPUT_TOKENS,
        temperature=_TEMPERATURE,
        model=OLLAMA_MODEL_SYS,
    )

    async def _ask() -> bool:
        return parse_verdict(await complete(request))

    try:
        return bool(await cache.get_or_set(ai_key(text, "court_case_intent"), _ask, _VERDICT_TTL_SECS))
    except Exception as exc:
        logger.warning(
            "court_case_classifier_failed",
            extra={"error": str(exc), "error_type": type(exc).__name__},
        )
        return False
