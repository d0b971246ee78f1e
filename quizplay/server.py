"""Quiz Server - App FastAPI com o router de tentativas."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from .router import configure_store, router
from .storage.quiz_store import KVBackend, QuizStore


def create_app(backend: KVBackend | None = None) -> FastAPI:
    """Cria a aplicacao.

    Args:
        backend: Backend KV opcional para persistir snapshots
    """
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="quizplay",
        description="Engine de quiz multi-formato",
        version="0.1.0",
    )
    configure_store(QuizStore(backend) if backend is not None else None)
    app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check."""
        return {"status": "ok"}

    return app
