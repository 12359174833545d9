from __future__ import annotations

import asyncio
import logging
import re
from typing import Awaitable, Callable, Dict, Optional, Sequence

from terminal_ai.api.config import OLLAMA_MODEL_SYS
from terminal_ai.api.services import ollama_client
from terminal_ai.api.services.cache import TTLCache, motd_key
from terminal_ai.api.services.cache import cache as shared_cache
from terminal_ai.api.services.intent import language_name
from terminal_ai.api.services.ollama_client import CompletionRequest, OllamaError
from terminal_ai.api.services.prompts import motd_system_prompt, motd_user_prompt
from terminal_ai.api.services.request_sink import RequestSink, record_safely
from terminal_ai.api.services.request_sink import request_sink as shared_sink

logger = logging.getLogger(__name__)

Completer = Callable[[CompletionRequest], Awaitable[str]]

MOTD_LANGUAGES = ("en", "ru", "ja", "fr", "uk")
MOTD_TTL_SECS = 300

_PREFIX_RE = re.compile(r"^(?:MOTD:|Message of the day:)\s*", re.IGNORECASE)


def clean_motd(raw: str) -> str:
    """Strip a leading "MOTD:" label and surrounding quotes the model likes to add."""
    text = _PREFIX_RE.sub("", (raw or "").strip())
    return text.strip().strip('"').strip()


class MotdGenerator:
    def __init__(
        self,
        complete: Optional[Completer] = None,
        cache: Optional[TTLCache] = None,
        sink: Optional[RequestSink] = None,
    ):
        self._complete: Completer = complete or ollama_client.complete
        self._cache = cache if cache is not None else shared_cache
        self._sink = sink if sink is not None else shared_sink

    async def generate(self, language: str = "en", previous_messages: Sequence[str] = ()) -> str:
        """One Bender-style line for language, shared by everyone for five minutes."""
        lang_name = language_name(language)
        request = CompletionRequest(
            system_prompt=motd_system_prompt(lang_name),
            user_text=motd_user_prompt(lang_name, list(previous_messages)),
            max_output_tokens=100,
            temperature=0.9,
            model=OLLAMA_MODEL_SYS,
        )

        async def _compute() -> str:
            return clean_motd(await self._complete(request))

        message = await self._cache.get_or_set(motd_key(language), _compute, MOTD_TTL_SECS)
        record_safely(self._sink, f"motd_{language}", "", message)
        return message

    async def generate_multilingual(self, previous_messages: Sequence[str] = ()) -> Dict[str, str]:
        """All languages concurrently; a language whose completion fails is left out."""
        results = await asyncio.gather(
            *(self.generate(lang, previous_messages) for lang in MOTD_LANGUAGES),
            return_exceptions=True,
        )

        motds: Dict[str, str] = {}
        for lang, result in zip(MOTD_LANGUAGES, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, OllamaError):
                logger.warning("motd_failed", extra={"language": lang, "error": str(result)})
                continue
            if isinstance(result, BaseException):
                raise result
            motds[lang] = result
        return motds


_default_generator: Optional[MotdGenerator] = None


def get_motd_generator() -> MotdGenerator:
    global _default_generator
    if _default_generator is None:
        _default_generator = MotdGenerator()
    return _default_generator
