from fastapi import APIRouter

from terminal_ai.api.config import (
    OLLAMA_CONNECT_TIMEOUT_SECS,
    OLLAMA_MODEL_LEGAL,
    OLLAMA_MODEL_SYS,
    OLLAMA_READ_TIMEOUT_SECS,
    OLLAMA_URL,
)
from terminal_ai.api.services.ollama_client import is_healthy
from terminal_ai.api.services.orchestrator import get_orchestrator

router = APIRouter()


@router.get("/health")
def health():
    return {
        "ok": True,
        "ollama_url": OLLAMA_URL,
        "ollama_model_legal": OLLAMA_MODEL_LEGAL,
        "ollama_model_sys": OLLAMA_MODEL_SYS,
        "ollama_timeouts": {
            "connect_secs": OLLAMA_CONNECT_TIMEOUT_SECS,
            "read_secs": OLLAMA_READ_TIMEOUT_SECS,
        },
        "connections": {
            "ollama": {"url": OLLAMA_URL, "healthy": is_healthy()},
            # Token is masked; only the first and last four characters are shown.
            "court_searcher": get_orchestrator().search_client.connection_info(),
        },
    }
