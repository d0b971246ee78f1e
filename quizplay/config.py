"""Quiz Config - Opcoes reconhecidas pelo engine."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} invalido: {raw!r}")


@dataclass(frozen=True)
class QuizConfig:
    """Configuracao de uma tentativa.

    Attributes:
        partial_credit_enabled: Credito proporcional nas variantes de pares
        coordinate_tolerance: Raio de tolerancia para coordenadas e graficos
        allow_out_of_order_submission: Permite responder questoes que nao a atual
        page_window_size: Tamanho da pagina pedida ao QuestionLoader
        max_cached_pages: Paginas mantidas em memoria (LRU) na fonte paginada
        max_nesting_depth: Profundidade maxima de questoes compostas
        loader_timeout: Timeout (s) de cada busca de pagina; None = sem timeout
    """

    partial_credit_enabled: bool = False
    coordinate_tolerance: float = 0.0
    allow_out_of_order_submission: bool = False
    page_window_size: int = 10
    max_cached_pages: int = 5
    max_nesting_depth: int = 3
    loader_timeout: float | None = None

    def __post_init__(self) -> None:
        if self.coordinate_tolerance < 0:
            raise ValueError("coordinate_tolerance deve ser >= 0")
        if self.page_window_size < 1:
            raise ValueError("page_window_size deve ser >= 1")
        if self.max_cached_pages < 1:
            raise ValueError("max_cached_pages deve ser >= 1")
        if self.max_nesting_depth < 1:
            raise ValueError("max_nesting_depth deve ser >= 1")
        if self.loader_timeout is not None and self.loader_timeout <= 0:
            raise ValueError("loader_timeout deve ser > 0")

    @classmethod
    def from_env(cls) -> QuizConfig:
        """Carrega configuracao das variaveis de ambiente QUIZ_*."""
        timeout = os.getenv("QUIZ_LOADER_TIMEOUT")
        return cls(
            partial_credit_enabled=_env_bool("QUIZ_PARTIAL_CREDIT", False),
            coordinate_tolerance=float(os.getenv("QUIZ_COORDINATE_TOLERANCE", "0")),
            allow_out_of_order_submission=_env_bool("QUIZ_ALLOW_OUT_OF_ORDER", False),
            page_window_size=int(os.getenv("QUIZ_PAGE_WINDOW_SIZE", "10")),
            max_cached_pages=int(os.getenv("QUIZ_MAX_CACHED_PAGES", "5")),
            max_nesting_depth=int(os.getenv("QUIZ_MAX_NESTING_DEPTH", "3")),
            loader_timeout=float(timeout) if timeout else None,
        )
