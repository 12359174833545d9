import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from terminal_ai.api.config import ALLOWED_ORIGINS, LOG_LEVEL
from terminal_ai.api.routes.ai import router as ai_router
from terminal_ai.api.routes.health import router as health_router

logging.basicConfig(level=LOG_LEVEL)

app = FastAPI(title="Retro Terminal AI API", version="0.3.0")

# The terminal front end is served from a different origin in development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(ai_router)
