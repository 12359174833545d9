from __future__ import annotations

import os
from typing import Optional

# ============================
# Environment helpers
# ============================

def _get_env(key: str, default: str, fallback_key: Optional[str] = None) -> str:
    """Fetch environment variable with optional fallback key and default."""

    value = os.getenv(key)
    if value is None and fallback_key:
        value = os.getenv(fallback_key)
    return value if value is not None else default


# ============================
# Ollama settings (general-purpose completion service)
# ============================
OLLAMA_URL = _get_env("OLLAMA_URL", "http://127.0.0.1:11434", fallback_key="OLLAMA_BASE_URL")
OLLAMA_MODEL_LEGAL = _get_env("OLLAMA_MODEL_LEGAL", _get_env("OLLAMA_MODEL", "llama3.1:8b"))
OLLAMA_MODEL_SYS = _get_env("OLLAMA_MODEL_SYS", "mistral:latest")

OLLAMA_CONNECT_TIMEOUT_SECS = float(_get_env("OLLAMA_CONNECT_TIMEOUT_SECS", "5"))
OLLAMA_READ_TIMEOUT_SECS = float(_get_env("OLLAMA_READ_TIMEOUT_SECS", "30"))
OLLAMA_FAILURE_COOLDOWN_SECS = float(_get_env("OLLAMA_FAILURE_COOLDOWN_SECS", "60"))

OLLAMA_NUM_PREDICT = int(_get_env("OLLAMA_NUM_PREDICT", "500"))
OLLAMA_TEMPERATURE = float(_get_env("OLLAMA_TEMPERATURE", "0.7"))

# ============================
# Zakon Online court searcher (specialized legal-case search)
# ============================
ZAKON_TOKEN = _get_env("ZAKON_TOKEN", "")
ZAKON_PLACEHOLDER_TOKEN = "DECxxxxxxxxx"
ZAKON_BASE_URL = _get_env("ZAKON_BASE_URL", "https://court.searcher.api.zakononline.com.ua/api")
ZAKON_TIMEOUT_SECS = float(_get_env("ZAKON_TIMEOUT_SECS", "10"))
ZAKON_PAGE_SIZE = int(_get_env("ZAKON_PAGE_SIZE", "5"))

# ============================
# Cache and request log
# ============================
CACHE_MAX_SIZE = int(_get_env("CACHE_MAX_SIZE", "1024"))
CACHE_DEFAULT_TTL_SECS = float(_get_env("CACHE_DEFAULT_TTL_SECS", "300"))
REQUEST_LOG_MAX_SIZE = int(_get_env("REQUEST_LOG_MAX_SIZE", "500"))

# ============================
# Output limits
# ============================
FULL_TEXT_MAX_CHARS = int(_get_env("FULL_TEXT_MAX_CHARS", "2000"))
MAX_CASE_RECORDS = 5
MAX_HIGHLIGHTS = 5

# ============================
# Application
# ============================
LOG_LEVEL = _get_env("LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = [
    o.strip()
    for o in _get_env("ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]
