"""Minimal smoke test: run one command through the full resolution pipeline."""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(REPO_ROOT))

from terminal_ai.api.services.intent import classify_legal_request
from terminal_ai.api.services.orchestrator import get_orchestrator
from terminal_ai.api.services.query_extraction import extract_search_queries


def main() -> None:
    command = " ".join(sys.argv[1:]) or "закон про спадщину"

    result = classify_legal_request(command)
    print(f"Command: {command}")
    print(f"Legal: matched={result.matched} confidence={result.confidence:.3f} language={result.language}")
    print(f"Search phrases: {list(extract_search_queries(command))}")

    orchestrator = get_orchestrator()
    print(f"Court searcher configured: {orchestrator.search_client.is_configured()}")

    answer = asyncio.run(orchestrator.resolve(command))
    print("-" * 60)
    print(answer)


if __name__ == "__main__":
    main()
