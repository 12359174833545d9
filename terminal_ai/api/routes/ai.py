from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

# === Module Imports ===
from terminal_ai.api.services import orchestrator
from terminal_ai.api.services.formatter import format_motd
from terminal_ai.api.services.motd import MOTD_LANGUAGES, get_motd_generator
from terminal_ai.api.services.ollama_client import OllamaError, is_healthy
from terminal_ai.api.services.request_sink import InMemoryRequestSink

logger = logging.getLogger(__name__)
router = APIRouter()

T = TypeVar("T")

_DISCONNECT_POLL_SECS = 0.5
_MAX_TEXT_CHARS = 2000


class CommandRequest(BaseModel):
    command: str = Field(..., min_length=1, max_length=_MAX_TEXT_CHARS)
    is_admin: bool = False


class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=_MAX_TEXT_CHARS)


class LegalSearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=_MAX_TEXT_CHARS)
    language: str = "uk"


class MotdRequest(BaseModel):
    language: Optional[str] = None
    previous_messages: List[str] = Field(default_factory=list)


async def _run_until_disconnect(request: Request, work: Awaitable[T]) -> T:
    """
    Await work, cancelling it if the HTTP client goes away first.

    A call already dispatched to an upstream is left to finish in its worker
    thread; the pipeline simply stops before its next call.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _pending = await asyncio.wait({task}, timeout=_DISCONNECT_POLL_SECS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("client_disconnected", extra={"path": request.url.path})
                task.cancel()
                raise HTTPException(status_code=499, detail="Client closed request")
    finally:
        if not task.done():
            task.cancel()


@router.post("/process-command")
async def process_command(req: CommandRequest, request: Request) -> Dict[str, Any]:
    text = await _run_until_disconnect(
        request, orchestrator.process_unknown_command(req.command, req.is_admin)
    )
    return {"response": text}


@router.post("/detect-legal")
async def detect_legal(req: QueryRequest) -> Dict[str, Any]:
    result = await orchestrator.detect_legal_request(req.query)
    return {
        "matched": result.matched,
        "confidence": result.confidence,
        "language": result.language,
    }


@router.post("/legal-search")
async def legal_search(req: LegalSearchRequest, request: Request) -> Dict[str, Any]:
    text = await _run_until_disconnect(
        request, orchestrator.search_legal_database(req.query, req.language)
    )
    return {"response": text}


@router.post("/court-cases")
async def court_cases(req: QueryRequest, request: Request) -> Dict[str, Any]:
    text = await _run_until_disconnect(request, orchestrator.process_court_case_request(req.query))
    return {"response": text}


@router.post("/tcc")
async def tcc(req: QueryRequest, request: Request) -> Dict[str, Any]:
    text = await _run_until_disconnect(request, orchestrator.process_tcc_request(req.query))
    return {"response": text}


@router.post("/motd")
async def motd(req: MotdRequest) -> Dict[str, Any]:
    generator = get_motd_generator()

    if req.language:
        if req.language not in MOTD_LANGUAGES:
            raise HTTPException(status_code=422, detail=f"Unsupported language: {req.language}")
        try:
            message = await generator.generate(req.language, req.previous_messages)
        except OllamaError as exc:
            raise HTTPException(status_code=503, detail=f"MOTD unavailable: {exc}") from exc
        messages = {req.language: message}
    else:
        messages = await generator.generate_multilingual(req.previous_messages)

    return {"motd": format_motd(messages), "messages": messages}


@router.get("/stats")
def stats() -> Dict[str, Any]:
    pipeline = orchestrator.get_orchestrator()
    sink = pipeline.sink
    return {
        "requests": sink.stats() if isinstance(sink, InMemoryRequestSink) else {},
        "cache": pipeline.cache.get_stats(),
        "ollama_healthy": is_healthy(),
    }


@router.get("/history")
def history(limit: int = 20) -> Dict[str, Any]:
    sink = orchestrator.get_orchestrator().sink
    if not isinstance(sink, InMemoryRequestSink):
        return {"items": []}
    items = sink.recent(max(1, min(limit, 200)))
    return {"items": [r.to_dict() for r in items]}
