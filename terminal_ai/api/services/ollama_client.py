from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from terminal_ai.api.config import (
    OLLAMA_CONNECT_TIMEOUT_SECS,
    OLLAMA_FAILURE_COOLDOWN_SECS,
    OLLAMA_MODEL_SYS,
    OLLAMA_NUM_PREDICT,
    OLLAMA_READ_TIMEOUT_SECS,
    OLLAMA_TEMPERATURE,
    OLLAMA_URL,
)

logger = logging.getLogger(__name__)


# ============================
# Circuit-breaker state
# ============================
_OLLAMA_HEALTHY: Optional[bool] = None
_OLLAMA_LAST_FAILURE: Optional[float] = None


# ============================
# Exceptions
# ============================
class OllamaError(RuntimeError):
    """Base exception for Ollama client errors."""

    code = "completion_error"


class OllamaTimeoutError(OllamaError):
    """Raised when Ollama request exceeds configured timeout."""

    code = "timeout"


class OllamaConnectionError(OllamaError):
    """Raised when Ollama connection cannot be established."""

    code = "connection"


class OllamaCooldownError(OllamaConnectionError):
    """Raised while the failure cool-down window is still open."""

    code = "cooldown"


class OllamaResponseError(OllamaError):
    """Raised when Ollama returns a non-successful or unreadable response."""

    code = "response"


# ============================
# Request model
# ============================
@dataclass(frozen=True)
class CompletionRequest:
    system_prompt: str
    user_text: str
    max_output_tokens: int = OLLAMA_NUM_PREDICT
    temperature: float = OLLAMA_TEMPERATURE
    model: str = OLLAMA_MODEL_SYS

    def to_messages(self) -> List[Dict[str, Any]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_text},
        ]


# ============================
# Client helpers
# ============================
def _prompt_char_length(messages: List[Dict[str, Any]]) -> int:
    return sum(len((m.get("content") or "")) for m in messages)


def _mark_failure() -> None:
    """Record a connectivity failure to activate the cool-down window."""
    global _OLLAMA_HEALTHY, _OLLAMA_LAST_FAILURE
    _OLLAMA_HEALTHY = False
    _OLLAMA_LAST_FAILURE = time.monotonic()


def _mark_success() -> None:
    global _OLLAMA_HEALTHY, _OLLAMA_LAST_FAILURE
    _OLLAMA_HEALTHY = True
    _OLLAMA_LAST_FAILURE = None


def _should_short_circuit() -> bool:
    """Determine if we should skip calling Ollama due to recent failures."""
    if _OLLAMA_HEALTHY is False and _OLLAMA_LAST_FAILURE is not None:
        elapsed = time.monotonic() - _OLLAMA_LAST_FAILURE
        return elapsed < OLLAMA_FAILURE_COOLDOWN_SECS
    return False


def reset_circuit() -> None:
    """Forget recorded failures (used on startup and in tests)."""
    global _OLLAMA_HEALTHY, _OLLAMA_LAST_FAILURE
    _OLLAMA_HEALTHY = None
    _OLLAMA_LAST_FAILURE = None


def is_healthy() -> Optional[bool]:
    return _OLLAMA_HEALTHY


def _merge_options(options: Dict[str, Any] | None) -> Dict[str, Any]:
    final_options: Dict[str, Any] = {
        "num_predict": OLLAMA_NUM_PREDICT,
        "temperature": OLLAMA_TEMPERATURE,
    }
    if options:
        final_options.update(options)
    return final_options


# ============================
# Public API
# ============================
def ollama_chat(model: str, messages: List[Dict[str, Any]], options: Dict[str, Any], request_id: str) -> str:
    """Non-streaming call. This blocks until Ollama finishes the full response."""

    if _should_short_circuit():
        raise OllamaCooldownError(
            "Recent Ollama failures detected; skipping request until cooldown expires."
        )

    final_options = _merge_options(options)

    payload = {
        "model": model,
        "messages": messages,
        "stream": False,
        "options": final_options,
    }

    start = time.monotonic()
    prompt_chars = _prompt_char_length(messages)

    try:
        resp = requests.post(
            f"{OLLAMA_URL}/api/chat",
            json=payload,
            timeout=(OLLAMA_CONNECT_TIMEOUT_SECS, OLLAMA_READ_TIMEOUT_SECS),
        )
        resp.raise_for_status()
    except requests.Timeout as exc:
        elapsed = time.monotonic() - start
        _mark_failure()
        logger.warning(
            "ollama_timeout",
            extra={
                "request_id": request_id,
                "model": model,
                "prompt_chars": prompt_chars,
                "num_predict": final_options.get("num_predict"),
                "temperature": final_options.get("temperature"),
                "elapsed_secs": round(elapsed, 3),
                "timeout_read_secs": OLLAMA_READ_TIMEOUT_SECS,
            },
        )
        raise OllamaTimeoutError(f"Ollama request timed out after {OLLAMA_READ_TIMEOUT_SECS}s") from exc
    except requests.ConnectionError as exc:
        _mark_failure()
        logger.error(
            "ollama_connection_error",
            extra={"request_id": request_id, "model": model, "prompt_chars": prompt_chars},
        )
        raise OllamaConnectionError(f"Unable to reach Ollama at {OLLAMA_URL}") from exc
    except requests.RequestException as exc:
        _mark_failure()
        logger.error(
            "ollama_response_error",
            extra={
                "request_id": request_id,
                "model": model,
                "prompt_chars": prompt_chars,
                "status_code": getattr(exc.response, "status_code", None),
            },
        )
        raise OllamaResponseError(f"Ollama request failed: {exc}") from exc

    elapsed = time.monotonic() - start
    try:
        data = resp.json()
    except ValueError as exc:
        raise OllamaResponseError("Ollama returned a non-JSON body") from exc

    if not isinstance(data, dict):
        raise OllamaResponseError("Ollama returned an unexpected payload")

    if data.get("error"):
        raise OllamaResponseError(str(data.get("error")))

    message = data.get("message")
    content = str((message.get("content") if isinstance(message, dict) else "") or "").strip()
    _mark_success()

    logger.info(
        "ollama_chat",
        extra={
            "request_id": request_id,
            "model": model,
            "prompt_chars": prompt_chars,
            "num_predict": final_options.get("num_predict"),
            "temperature": final_options.get("temperature"),
            "elapsed_secs": round(elapsed, 3),
            "timeout_read_secs": OLLAMA_READ_TIMEOUT_SECS,
        },
    )

    return content


async def complete(request: CompletionRequest, request_id: str = "") -> str:
    """
    Run one chat completion without blocking the event loop.

    The blocking HTTP call runs in a worker thread. Cancelling the awaiting task
    returns control immediately; the dispatched call itself is left to finish.
    """
    return await asyncio.to_thread(
        ollama_chat,
        request.model,
        request.to_messages(),
        {"num_predict": request.max_output_tokens, "temperature": request.temperature},
        request_id,
    )
