from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import requests

from terminal_ai.api.config import (
    ZAKON_BASE_URL,
    ZAKON_PAGE_SIZE,
    ZAKON_PLACEHOLDER_TOKEN,
    ZAKON_TIMEOUT_SECS,
    ZAKON_TOKEN,
)

logger = logging.getLogger(__name__)


# ============================
# Exceptions
# ============================
class CaseSearchError(RuntimeError):
    """Base exception for court searcher failures."""

    code = "case_search_error"


class CaseSearchUnavailable(CaseSearchError):
    """Raised when the searcher cannot be reached or times out."""

    code = "unavailable"


class CaseSearchResponseError(CaseSearchError):
    """Raised on a non-2xx status or an unreadable body."""

    code = "response"


# ============================
# Helpers
# ============================
def mask_token(token: Optional[str]) -> str:
    """Show only the first and last four characters of a credential."""
    if not token:
        return "not set"
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}...{token[-4:]}"


# ============================
# Client
# ============================
class ZakonOnlineClient:
    """Bearer-token client for the Zakon Online court-decision searcher."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = ZAKON_BASE_URL,
        timeout_secs: float = ZAKON_TIMEOUT_SECS,
        session: Optional[requests.Session] = None,
    ):
        self._token = ZAKON_TOKEN if token is None else token
        self._base_url = base_url.rstrip("/")
        self._timeout_secs = timeout_secs
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def is_configured(self) -> bool:
        return bool(self._token) and self._token != ZAKON_PLACEHOLDER_TOKEN

    def connection_info(self) -> Dict[str, Any]:
        return {
            "configured": self.is_configured(),
            "base_url": self._base_url,
            "token": mask_token(self._token),
        }

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.is_configured():
            raise CaseSearchUnavailable("Court searcher token is not configured")

        url = f"{self._base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }
        start = time.monotonic()

        try:
            resp = self._session.get(url, params=params, headers=headers, timeout=self._timeout_secs)
            resp.raise_for_status()
        except requests.Timeout as exc:
            logger.warning("case_search_timeout", extra={"path": path, "timeout_secs": self._timeout_secs})
            raise CaseSearchUnavailable(f"Court searcher timed out after {self._timeout_secs}s") from exc
        except requests.ConnectionError as exc:
            logger.error("case_search_connection_error", extra={"path": path, "base_url": self._base_url})
            raise CaseSearchUnavailable(f"Unable to reach court searcher at {self._base_url}") from exc
        except requests.RequestException as exc:
            status = getattr(exc.response, "status_code", None)
            logger.error("case_search_response_error", extra={"path": path, "status_code": status})
            raise CaseSearchResponseError(f"Court searcher request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise CaseSearchResponseError("Court searcher returned a non-JSON body") from exc

        if not isinstance(data, dict):
            raise CaseSearchResponseError("Court searcher returned an unexpected payload")

        logger.info(
            "case_search_call",
            extra={"path": path, "elapsed_secs": round(time.monotonic() - start, 3)},
        )
        return data

    # --- Blocking calls ---
    def search_metadata(self, query: str, page: int = 1, page_size: int = ZAKON_PAGE_SIZE) -> Dict[str, Any]:
        return self._get(
            "/Searcher/GetEntitiesMetaWith",
            {"searchText": query, "page": page, "pageSize": page_size},
        )

    def get_full_text(self, decision_id: str, query: str) -> Dict[str, Any]:
        return self._get(
            "/Searcher/GetSearchText",
            {"id": decision_id, "searchText": query},
        )

    # --- Async wrappers ---
    async def search_metadata_async(self, query: str, page: int = 1, page_size: int = ZAKON_PAGE_SIZE) -> Dict[str, Any]:
        return await asyncio.to_thread(self.search_metadata, query, page, page_size)

    async def get_full_text_async(self, decision_id: str, query: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self.get_full_text, decision_id, query)
