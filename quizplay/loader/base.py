"""Question Loader - Contrato do fornecedor paginado de questoes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class QuestionLoader(Protocol):
    """Fornecedor externo de paginas de questoes.

    ``total_questions`` e um limite superior fixo durante a tentativa. Cada
    item retornado por ``load_questions`` pode ser uma variante de Question
    ou um dict validavel como tal.

    Loaders podem declarar ``order_authoritative = False`` para permitir
    embaralhamento no cliente; a ausencia do atributo equivale a True.
    """

    total_questions: int

    async def load_questions(self, start_index: int, count: int) -> Sequence[Any]: ...
