"""Question Sources - Acesso por posicao logica as questoes de uma tentativa.

Uma fonte traduz a posicao logica (cursor) para a posicao fisica da questao,
o que permite embaralhar sem reescrever a sequencia original. A fonte paginada
e o unico ponto do engine que suspende.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import OrderedDict
from collections.abc import Sequence

from pydantic import ValidationError

from ..exceptions import LoaderFailureError, NavigationBoundaryError
from ..models.questions import BaseQuestion, parse_question
from .base import QuestionLoader

logger = logging.getLogger(__name__)


class QuestionSource:
    """Base das fontes de questoes."""

    supports_reordering: bool = True

    def __init__(self) -> None:
        self._order: list[int] | None = None

    @property
    def total(self) -> int:
        raise NotImplementedError

    def _cached(self, physical: int) -> BaseQuestion | None:
        raise NotImplementedError

    async def _materialize(self, physical: int) -> None:
        raise NotImplementedError

    def _touch(self, physical: int) -> None:
        return None

    def physical_index(self, index: int) -> int:
        if self._order is None:
            return index
        return self._order[index]

    def in_bounds(self, index: int) -> bool:
        return 0 <= index < self.total

    def peek(self, index: int) -> BaseQuestion | None:
        """Questao na posicao logica, apenas se ja materializada."""
        if not self.in_bounds(index):
            return None
        return self._cached(self.physical_index(index))

    async def get(self, index: int) -> BaseQuestion:
        """Questao na posicao logica, buscando a pagina se necessario.

        Raises:
            NavigationBoundaryError: posicao fora do conjunto
            LoaderFailureError: falha na busca da pagina
        """
        if not self.in_bounds(index):
            raise NavigationBoundaryError(
                f"Posicao {index} fora do quiz (total {self.total})",
                details={"index": index, "total": self.total},
            )

        physical = self.physical_index(index)
        question = self._cached(physical)
        if question is None:
            await self._materialize(physical)
            question = self._cached(physical)

        if question is None:
            raise NavigationBoundaryError(
                f"Posicao {index} alem do fim do quiz",
                details={"index": index, "total": self.total},
            )
        self._touch(physical)
        return question

    def materialized(self) -> list[tuple[int, BaseQuestion]]:
        """Pares (posicao logica, questao) ja disponiveis em memoria."""
        pairs = []
        for index in range(self.total):
            question = self.peek(index)
            if question is not None:
                pairs.append((index, question))
        return pairs

    def find(self, question_id: str) -> tuple[int, BaseQuestion] | None:
        for index, question in self.materialized():
            if question.id == question_id:
                return index, question
        return None

    def order(self) -> list[int]:
        return list(self._order) if self._order is not None else list(range(self.total))

    def reorder(self, positions: Sequence[int], rng: random.Random) -> None:
        """Permuta entre si apenas as posicoes logicas informadas."""
        if self._order is None:
            self._order = list(range(self.total))

        physicals = [self._order[p] for p in positions]
        rng.shuffle(physicals)
        for position, physical in zip(positions, physicals, strict=True):
            self._order[position] = physical


class InMemoryQuestionSource(QuestionSource):
    """Sequencia totalmente materializada (quizzes pequenos)."""

    def __init__(self, questions: Sequence[BaseQuestion]):
        super().__init__()
        self._questions = list(questions)

    @property
    def total(self) -> int:
        return len(self._questions)

    def _cached(self, physical: int) -> BaseQuestion | None:
        if 0 <= physical < len(self._questions):
            return self._questions[physical]
        return None

    async def _materialize(self, physical: int) -> None:
        return None


class PagedQuestionSource(QuestionSource):
    """Fonte paginada sobre um QuestionLoader.

    Busca paginas alinhadas de ``page_size`` sob demanda, sem look-ahead.
    Uma pagina curta marca o fim efetivo do conjunto (``total_questions`` e
    apenas limite superior). Nao ha retry automatico.

    Example:
        >>> source = PagedQuestionSource(loader, page_size=10)
        >>> question = await source.get(10)  # busca a pagina 10-19
        >>> source.fetch_count
        1
    """

    def __init__(
        self,
        loader: QuestionLoader,
        page_size: int = 10,
        prefetched: Sequence[BaseQuestion] | None = None,
        timeout: float | None = None,
        max_cached_pages: int | None = None,
    ):
        super().__init__()
        self.loader = loader
        self.page_size = page_size
        self.timeout = timeout
        self.fetch_count = 0
        self.supports_reordering = not getattr(loader, "order_authoritative", True)
        self._declared_total = int(loader.total_questions)
        self._known_end: int | None = None
        self.max_cached_pages = max_cached_pages
        self._cache: dict[int, BaseQuestion] = {}
        self._pages: OrderedDict[int, None] = OrderedDict()

        for index, question in enumerate((prefetched or [])[: self._declared_total]):
            self._cache[index] = question
            self._pages[index // page_size] = None

    @property
    def total(self) -> int:
        if self._known_end is None:
            return self._declared_total
        return min(self._declared_total, self._known_end)

    def _cached(self, physical: int) -> BaseQuestion | None:
        return self._cache.get(physical)

    def _touch(self, physical: int) -> None:
        page = physical // self.page_size
        if page in self._pages:
            self._pages.move_to_end(page)

    def materialized(self) -> list[tuple[int, BaseQuestion]]:
        if self._order is not None:
            return super().materialized()
        return [(i, self._cache[i]) for i in sorted(self._cache) if i < self.total]

    async def _materialize(self, physical: int) -> None:
        start = (physical // self.page_size) * self.page_size
        count = min(self.page_size, self._declared_total - start)
        if count <= 0:
            return

        logger.debug(f"Buscando pagina de questoes: start={start} count={count}")
        try:
            fetch = self.loader.load_questions(start, count)
            if self.timeout is not None:
                items = await asyncio.wait_for(fetch, timeout=self.timeout)
            else:
                items = await fetch
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout buscando questoes {start}-{start + count - 1}")
            raise LoaderFailureError(
                f"Timeout ao carregar questoes a partir de {start}",
                details={"start_index": start, "count": count, "timeout": self.timeout},
            ) from e
        except Exception as e:
            logger.error(f"Falha no loader ({start}-{start + count - 1}): {e}")
            raise LoaderFailureError(
                f"Falha ao carregar questoes a partir de {start}: {e}",
                details={"start_index": start, "count": count},
            ) from e

        self.fetch_count += 1

        try:
            questions = [parse_question(item) for item in items]
        except (ValidationError, TypeError, ValueError) as e:
            logger.error(f"Pagina malformada a partir de {start}: {e}")
            raise LoaderFailureError(
                f"Loader retornou dados malformados a partir de {start}",
                details={"start_index": start, "count": count},
            ) from e

        if len(questions) > count:
            logger.warning(
                f"Loader retornou {len(questions)} questoes para count={count}; excedente ignorado"
            )
            questions = questions[:count]

        for offset, question in enumerate(questions):
            self._cache[start + offset] = question
        self._pages[start // self.page_size] = None
        self._pages.move_to_end(start // self.page_size)
        self._evict()

        if len(questions) < count:
            end = start + len(questions)
            self._known_end = end if self._known_end is None else min(self._known_end, end)
            logger.info(f"Fim efetivo do quiz detectado na posicao {end}")

    def _evict(self) -> None:
        """Descarta as paginas menos usadas alem de max_cached_pages."""
        if self.max_cached_pages is None:
            return
        while len(self._pages) > self.max_cached_pages:
            page, _ = self._pages.popitem(last=False)
            first = page * self.page_size
            for physical in range(first, first + self.page_size):
                self._cache.pop(physical, None)
            logger.debug(f"Pagina {page} descartada do cache")
