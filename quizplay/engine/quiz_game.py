"""Quiz Game - Maquina de estados do ciclo de vida e da navegacao."""

from __future__ import annotations

import asyncio
import functools
import logging
import random
import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from ..config import QuizConfig
from ..exceptions import (
    AnswerTypeMismatchError,
    InvalidStateTransitionError,
    NavigationBoundaryError,
    QuizError,
    UnknownQuestionError,
)
from ..loader.base import QuestionLoader
from ..loader.sources import InMemoryQuestionSource, PagedQuestionSource, QuestionSource
from ..models.enums import QuizStatus
from ..models.questions import BaseQuestion, PassageQuestion, parse_question
from ..models.schemas import Answer, OperationResult
from ..models.state import QuizState, utcnow
from ..models.values import ANSWER_VALUE_ADAPTER, LocalizedText
from .scoring_engine import QuizScoringEngine

logger = logging.getLogger(__name__)


def _guarded(func):
    """Serializa a operacao e converte QuizError em OperationResult."""

    @functools.wraps(func)
    async def wrapper(self: QuizGame, *args: Any, **kwargs: Any) -> OperationResult:
        async with self._lock:
            try:
                return await func(self, *args, **kwargs)
            except QuizError as e:
                logger.warning(
                    f"[Quiz {self.state.quiz_id}] {func.__name__} rejeitada "
                    f"({e.code.value if e.code else 'erro'}): {e.message}"
                )
                return OperationResult.from_error(e)

    return wrapper


class QuizGame:
    """Dono unico de uma tentativa (QuizState).

    Estados: NOT_STARTED -> IN_PROGRESS <-> PAUSED -> COMPLETED (terminal).

    Todas as operacoes que alteram estado rodam sob um asyncio.Lock da
    tentativa. Operacoes rejeitadas nao alteram o estado e retornam
    OperationResult(success=False) com error e code.

    Example:
        >>> game = QuizGame.from_questions(questions)
        >>> await game.start_quiz()
        >>> result = await game.submit_answer("q1", TextValue(value="B"))
        >>> result.answer.is_correct
        True
    """

    def __init__(
        self,
        state: QuizState,
        config: QuizConfig | None = None,
        scoring: QuizScoringEngine | None = None,
        rng: random.Random | None = None,
    ):
        self.state = state
        self.config = config or QuizConfig()
        self.scoring = scoring or QuizScoringEngine(self.config)
        self.rng = rng or random.Random()
        self.source = self._build_source()
        self._lock = asyncio.Lock()
        self._shown_at: datetime | None = None
        self._shown_paused_seconds = 0.0

        if state.question_loader is None and state.questions is not None:
            state.metadata.setdefault(
                "total_points_possible", sum(q.points for q in state.questions)
            )

    @classmethod
    def from_questions(
        cls,
        questions: Sequence[Any],
        quiz_id: str | None = None,
        config: QuizConfig | None = None,
        **kwargs: Any,
    ) -> QuizGame:
        """Cria tentativa sobre uma sequencia materializada."""
        state = QuizState(
            quiz_id=quiz_id or uuid.uuid4().hex[:8],
            questions=[parse_question(q) for q in questions],
        )
        return cls(state, config=config, **kwargs)

    @classmethod
    def from_loader(
        cls,
        loader: QuestionLoader,
        quiz_id: str | None = None,
        config: QuizConfig | None = None,
        prefetched: Sequence[BaseQuestion] | None = None,
        **kwargs: Any,
    ) -> QuizGame:
        """Cria tentativa sobre um QuestionLoader paginado."""
        state = QuizState(
            quiz_id=quiz_id or uuid.uuid4().hex[:8],
            questions=list(prefetched) if prefetched else None,
            question_loader=loader,
        )
        return cls(state, config=config, **kwargs)

    def _build_source(self) -> QuestionSource:
        # Com loader presente, ele e autoritativo e questions vira cache de prefetch
        if self.state.question_loader is not None:
            return PagedQuestionSource(
                self.state.question_loader,
                page_size=self.config.page_window_size,
                prefetched=self.state.questions,
                timeout=self.config.loader_timeout,
                max_cached_pages=self.config.max_cached_pages,
            )
        return InMemoryQuestionSource(self.state.questions or [])

    # =========================================================================
    # Consultas
    # =========================================================================

    @property
    def status(self) -> QuizStatus:
        return self.state.status

    @property
    def total_questions(self) -> int:
        return self.source.total

    @property
    def current_question(self) -> BaseQuestion | None:
        """Questao no cursor, sem buscar paginas."""
        if self.state.status in (QuizStatus.NOT_STARTED, QuizStatus.COMPLETED):
            return None
        return self.source.peek(self.state.current_question_index)

    def calculate_score(self) -> float:
        """Soma dos scores avaliados. Pura, valida em qualquer estado."""
        return self.scoring.total_score(self.state.user_answers.values())

    async def get_current_question(self) -> BaseQuestion | None:
        """Questao no cursor, buscando a pagina se necessario.

        Retorna None (nunca levanta) fora de jogo, fora dos limites ou em
        falha do loader.
        """
        if self.state.status in (QuizStatus.NOT_STARTED, QuizStatus.COMPLETED):
            return None

        async with self._lock:
            try:
                return await self.source.get(self.state.current_question_index)
            except QuizError as e:
                logger.warning(f"[Quiz {self.state.quiz_id}] questao atual indisponivel: {e.message}")
                return None

    def get_hint(self, question_id: str) -> LocalizedText | None:
        """Dica (metadata.hint) de uma questao ou sub-questao materializada."""
        for _, question in self.source.materialized():
            found = self._find_in_tree(question, question_id, depth=0)
            if found is not None:
                return found.metadata.hint
        return None

    def snapshot(self) -> dict[str, Any]:
        """Snapshot serializavel para o colaborador de persistencia."""
        data = self.state.to_dict()
        data["total_questions"] = self.source.total
        data["question_order"] = self.source.order()
        data["summary"] = self.scoring.summarize(self.state.user_answers.values())
        return data

    # =========================================================================
    # Ciclo de vida
    # =========================================================================

    @_guarded
    async def start_quiz(self) -> OperationResult:
        """NOT_STARTED -> IN_PROGRESS, carregando a primeira pagina."""
        self._require(QuizStatus.NOT_STARTED, action="iniciar")

        if self.source.total > 0:
            try:
                await self.source.get(0)
            except NavigationBoundaryError:
                logger.info(f"[Quiz {self.state.quiz_id}] Loader nao retornou questoes")

        now = utcnow()
        self.state.start_time = now
        self.state.status = QuizStatus.IN_PROGRESS
        self._move_to(0, now)

        logger.info(f"[Quiz {self.state.quiz_id}] Iniciado com {self.source.total} questoes")
        return OperationResult.ok()

    @_guarded
    async def pause_quiz(self) -> OperationResult:
        self._require(QuizStatus.IN_PROGRESS, action="pausar")

        self.state.paused_at = utcnow()
        self.state.status = QuizStatus.PAUSED
        logger.info(f"[Quiz {self.state.quiz_id}] Pausado")
        return OperationResult.ok()

    @_guarded
    async def resume_quiz(self) -> OperationResult:
        self._require(QuizStatus.PAUSED, action="retomar")

        self._fold_pause(utcnow())
        self.state.status = QuizStatus.IN_PROGRESS
        logger.info(f"[Quiz {self.state.quiz_id}] Retomado")
        return OperationResult.ok()

    @_guarded
    async def end_quiz(self) -> OperationResult:
        """Finaliza a tentativa. Idempotente quando ja COMPLETED."""
        if self.state.status == QuizStatus.COMPLETED:
            return OperationResult.ok()

        now = utcnow()
        if self.state.status == QuizStatus.PAUSED:
            self._fold_pause(now)

        self.state.end_time = now
        self.state.score = self.calculate_score()
        self.state.status = QuizStatus.COMPLETED

        logger.info(
            f"[Quiz {self.state.quiz_id}] Finalizado: score={self.state.score} "
            f"respostas={len(self.state.user_answers)}"
        )
        return OperationResult.ok()

    # =========================================================================
    # Respostas
    # =========================================================================

    @_guarded
    async def submit_answer(self, question_id: str, answer: Any) -> OperationResult:
        """Valida e registra a resposta de uma questao.

        Args:
            question_id: ID da questao respondida
            answer: Answer (so value/submitted_at/time_spent sao usados),
                AnswerValue ou dict validavel como AnswerValue

        Returns:
            OperationResult com o Answer criado
        """
        self._require(QuizStatus.IN_PROGRESS, action="responder")

        value, submitted_at, time_spent = self._unpack_answer(question_id, answer)
        index, question = self._resolve_target(question_id)

        if value.type != question.expected_value_type:
            raise AnswerTypeMismatchError(
                f"Questao {question_id} espera '{question.expected_value_type}', "
                f"recebido '{value.type}'",
                details={
                    "question_id": question_id,
                    "expected": question.expected_value_type,
                    "received": value.type,
                },
            )

        evaluation = self.scoring.evaluate(question, value)

        now = utcnow()
        if time_spent is None and index == self.state.current_question_index:
            time_spent = self._time_on_current(now)

        record = Answer(
            question_id=question_id,
            value=value,
            is_correct=evaluation.is_correct,
            score=evaluation.points,
            max_score=evaluation.max_points,
            evaluated=evaluation.evaluated,
            submitted_at=submitted_at or now,
            time_spent=time_spent,
        )
        self.state.record_answer(record)
        self.state.score = self.calculate_score()

        logger.debug(
            f"[Quiz {self.state.quiz_id}] Resposta {question_id}: "
            f"correta={record.is_correct} score={record.score}"
        )
        return OperationResult.ok(record)

    def _unpack_answer(
        self, question_id: str, answer: Any
    ) -> tuple[Any, datetime | None, float | None]:
        if isinstance(answer, Answer):
            if answer.question_id != question_id:
                raise UnknownQuestionError(
                    f"Answer pertence a {answer.question_id}, nao a {question_id}",
                    details={"question_id": question_id, "answer_question_id": answer.question_id},
                )
            return answer.value, answer.submitted_at, answer.time_spent

        if isinstance(answer, dict):
            try:
                return ANSWER_VALUE_ADAPTER.validate_python(answer), None, None
            except ValidationError as e:
                raise AnswerTypeMismatchError(
                    f"Valor de resposta invalido para {question_id}",
                    details={"question_id": question_id, "errors": e.error_count()},
                ) from e

        if not hasattr(answer, "type"):
            raise AnswerTypeMismatchError(
                f"Valor de resposta sem tag de tipo para {question_id}",
                details={"question_id": question_id},
            )
        return answer, None, None

    def _resolve_target(self, question_id: str) -> tuple[int, BaseQuestion]:
        cursor = self.state.current_question_index
        current = self.source.peek(cursor)
        if current is not None and current.id == question_id:
            return cursor, current

        found = self.source.find(question_id)
        if found is None:
            raise UnknownQuestionError(
                f"Questao {question_id} nao encontrada",
                details={"question_id": question_id},
            )

        if not self.config.allow_out_of_order_submission:
            raise UnknownQuestionError(
                f"Questao {question_id} nao e a questao atual",
                details={
                    "question_id": question_id,
                    "current_question_id": current.id if current else None,
                },
            )

        if self.state.is_answered(question_id):
            raise InvalidStateTransitionError(
                f"Questao {question_id} ja respondida; reenvio so na questao atual",
                details={"question_id": question_id},
            )
        return found

    # =========================================================================
    # Navegacao
    # =========================================================================

    @_guarded
    async def next_question(self) -> OperationResult:
        self._require(QuizStatus.IN_PROGRESS, action="avancar")

        target = await self._fetch_next()
        self._move_to(target, utcnow())
        return OperationResult.ok()

    @_guarded
    async def previous_question(self) -> OperationResult:
        self._require(QuizStatus.IN_PROGRESS, action="voltar")

        cursor = self.state.current_question_index
        if cursor <= 0:
            raise NavigationBoundaryError(
                "Ja esta na primeira questao",
                details={"index": cursor},
            )

        await self.source.get(cursor - 1)
        self._move_to(cursor - 1, utcnow())
        return OperationResult.ok()

    @_guarded
    async def skip_question(self) -> OperationResult:
        """Pula a questao atual sem registrar Answer e avanca."""
        self._require(QuizStatus.IN_PROGRESS, action="pular")

        current = self.source.peek(self.state.current_question_index)
        target = await self._fetch_next()

        if current is not None:
            self.state.mark_skipped(current.id)
        self._move_to(target, utcnow())
        return OperationResult.ok()

    @_guarded
    async def shuffle_questions(self) -> OperationResult:
        """Embaralha apenas posicoes nao visitadas e nao respondidas."""
        if self.state.status not in (QuizStatus.NOT_STARTED, QuizStatus.IN_PROGRESS):
            raise InvalidStateTransitionError(
                f"Nao e possivel embaralhar no estado {self.state.status.value}",
                details={"status": self.state.status.value},
            )
        if not self.source.supports_reordering:
            raise InvalidStateTransitionError(
                "O loader define a ordem das questoes; embaralhamento nao permitido",
            )

        visited = self.state.visited_indices
        first_free = max(visited) + 1 if visited else 0
        positions = []
        for index in range(first_free, self.source.total):
            question = self.source.peek(index)
            if question is not None and self.state.is_answered(question.id):
                continue
            positions.append(index)

        if len(positions) > 1:
            self.source.reorder(positions, self.rng)

        logger.info(f"[Quiz {self.state.quiz_id}] {len(positions)} posicoes embaralhadas")
        return OperationResult.ok()

    async def _fetch_next(self) -> int:
        target = self.state.current_question_index + 1
        if not self.source.in_bounds(target):
            raise NavigationBoundaryError(
                "Ja esta na ultima questao",
                details={"index": self.state.current_question_index, "total": self.source.total},
            )
        await self.source.get(target)
        return target

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require(self, status: QuizStatus, action: str) -> None:
        if self.state.status != status:
            raise InvalidStateTransitionError(
                f"Nao e possivel {action} no estado {self.state.status.value}",
                details={"status": self.state.status.value, "required": status.value},
            )

    def _move_to(self, index: int, now: datetime) -> None:
        self.state.current_question_index = index
        self.state.visited_indices.add(index)
        self._shown_at = now
        self._shown_paused_seconds = self.state.paused_seconds

    def _fold_pause(self, now: datetime) -> None:
        if self.state.paused_at is not None:
            self.state.paused_seconds += (now - self.state.paused_at).total_seconds()
            self.state.paused_at = None

    def _time_on_current(self, now: datetime) -> float | None:
        if self._shown_at is None:
            return None
        paused = self.state.paused_seconds - self._shown_paused_seconds
        return max(0.0, (now - self._shown_at).total_seconds() - paused)

    def _find_in_tree(
        self, question: BaseQuestion, question_id: str, depth: int
    ) -> BaseQuestion | None:
        if question.id == question_id:
            return question
        if isinstance(question, PassageQuestion) and depth < self.config.max_nesting_depth:
            for sub in question.sub_questions:
                found = self._find_in_tree(sub, question_id, depth + 1)
                if found is not None:
                    return found
        return None
