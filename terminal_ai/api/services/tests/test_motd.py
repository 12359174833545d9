import asyncio

from terminal_ai.api.services import motd
from terminal_ai.api.services.cache import TTLCache
from terminal_ai.api.services.motd import MOTD_LANGUAGES, MotdGenerator, clean_motd
from terminal_ai.api.services.ollama_client import OllamaConnectionError
from terminal_ai.api.services.request_sink import InMemoryRequestSink


class LanguageCompleter:
    def __init__(self, failing_language=None):
        self.failing_language = failing_language
        self.requests = []

    async def __call__(self, request):
        self.requests.append(request)
        if self.failing_language and self.failing_language in request.system_prompt:
            raise OllamaConnectionError("unreachable")
        return "MOTD: Bite my shiny metal terminal."


def test_clean_motd_strips_labels():
    assert clean_motd("MOTD: Hello") == "Hello"
    assert clean_motd("Message of the day:   Hello") == "Hello"
    assert clean_motd('  "Hello"  ') == "Hello"
    assert clean_motd("Hello MOTD: there") == "Hello MOTD: there"


def test_generate_is_cached_and_recorded(monkeypatch):
    # === Configuration ===
    monkeypatch.setattr(motd, "motd_key", lambda language: f"motd_{language}_fixed")
    completer = LanguageCompleter()
    sink = InMemoryRequestSink()
    generator = MotdGenerator(complete=completer, cache=TTLCache(), sink=sink)

    # === Act ===
    async def run():
        first = await generator.generate("en")
        second = await generator.generate("en")
        return first, second

    first, second = asyncio.run(run())

    # === Assert ===
    assert first == second == "Bite my shiny metal terminal."
    assert len(completer.requests) == 1
    request = completer.requests[0]
    assert request.max_output_tokens == 100
    assert request.temperature == 0.9
    assert "Bender" in request.system_prompt
    assert [r.kind for r in sink.recent()] == ["motd_en", "motd_en"]


def test_previous_messages_are_sent_to_model(monkeypatch):
    monkeypatch.setattr(motd, "motd_key", lambda language: f"motd_{language}_fixed")
    completer = LanguageCompleter()
    generator = MotdGenerator(complete=completer, cache=TTLCache(), sink=InMemoryRequestSink())

    asyncio.run(generator.generate("fr", ["Old joke"]))

    assert "Old joke" in completer.requests[0].user_text
    assert "French" in completer.requests[0].user_text


def test_multilingual_skips_failing_language(monkeypatch):
    # === Configuration ===
    monkeypatch.setattr(motd, "motd_key", lambda language: f"motd_{language}_fixed")
    completer = LanguageCompleter(failing_language="Japanese")
    generator = MotdGenerator(complete=completer, cache=TTLCache(), sink=InMemoryRequestSink())

    # === Act ===
    motds = asyncio.run(generator.generate_multilingual())

    # === Assert ===
    assert list(motds) == [lang for lang in MOTD_LANGUAGES if lang != "ja"]
    assert all(text == "Bite my shiny metal terminal." for text in motds.values())
