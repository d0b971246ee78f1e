"""Quiz Scoring Engine - Despacho de validacao e pontuacao por questao."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from ..config import QuizConfig
from ..exceptions import RecursionLimitExceededError, ValidatorFailureError
from ..models.questions import BaseQuestion, PassageQuestion
from ..models.schemas import Answer, ValidationOutcome
from .validator import AnswerValidator, coerce_outcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Evaluation:
    """Avaliacao de uma resposta para uma questao."""

    is_correct: bool
    fraction: float
    evaluated: bool
    points: float
    max_points: float


class QuizScoringEngine:
    """Motor de pontuacao das tentativas.

    Ordem de decisao para cada questao:
        1. validador customizado da questao (se houver) - exclusivo
        2. questao composta: media das sub-questoes, recursiva
        3. questao nao avaliada: registrada sem nota
        4. AnswerValidator padrao

    O score fracionario e multiplicado por ``metadata.points`` (peso 1 por
    padrao).

    Example:
        >>> engine = QuizScoringEngine(QuizConfig())
        >>> evaluation = engine.evaluate(question, TextValue(value="B"))
        >>> evaluation.points
        1.0
    """

    def __init__(
        self,
        config: QuizConfig | None = None,
        validator: AnswerValidator | None = None,
    ):
        self.config = config or QuizConfig()
        self.validator = validator or AnswerValidator(self.config)

    def evaluate(self, question: BaseQuestion, value: Any) -> Evaluation:
        """Avalia um valor submetido para uma questao de topo.

        Raises:
            RecursionLimitExceededError: aninhamento profundo demais ou ciclico
        """
        outcome = self._validate(question, value, depth=0, ancestry=())
        if outcome is None:
            return Evaluation(
                is_correct=False, fraction=0.0, evaluated=False, points=0.0, max_points=0.0
            )

        points = outcome.score * question.points
        logger.debug(
            f"Questao {question.id}: correta={outcome.is_correct} fracao={outcome.score:.3f}"
        )
        return Evaluation(
            is_correct=outcome.is_correct,
            fraction=outcome.score,
            evaluated=True,
            points=points,
            max_points=question.points,
        )

    def _validate(
        self,
        question: BaseQuestion,
        value: Any,
        depth: int,
        ancestry: tuple[int, ...],
    ) -> ValidationOutcome | None:
        """Retorna None quando a questao nao e avaliavel."""
        if depth > self.config.max_nesting_depth:
            raise RecursionLimitExceededError(
                f"Aninhamento de questoes excede {self.config.max_nesting_depth} niveis",
                details={"question_id": question.id, "depth": depth},
            )
        if id(question) in ancestry:
            raise RecursionLimitExceededError(
                f"Ciclo detectado na questao {question.id}",
                details={"question_id": question.id},
            )

        if question.validator is not None:
            return self._run_custom(question, value)

        if isinstance(question, PassageQuestion):
            return self._validate_passage(question, value, depth, ancestry + (id(question),))

        if not question.is_objective:
            return None

        return self.validator.validate(value, question.correct_answer)

    @staticmethod
    def is_evaluable(question: BaseQuestion) -> bool:
        return question.validator is not None or question.is_composite or question.is_objective

    def _run_custom(self, question: BaseQuestion, value: Any) -> ValidationOutcome:
        custom = question.validator
        try:
            if hasattr(custom, "validate"):
                raw = custom.validate(value, question.correct_answer)
            else:
                raw = custom(value, question.correct_answer)
            return coerce_outcome(raw)
        except Exception as e:
            logger.error(f"Validador customizado falhou na questao {question.id}: {e}")
            raise ValidatorFailureError(
                f"Validador da questao {question.id} falhou: {e}",
                details={"question_id": question.id, "error": type(e).__name__},
            ) from e

    def _validate_passage(
        self,
        question: PassageQuestion,
        value: Any,
        depth: int,
        ancestry: tuple[int, ...],
    ) -> ValidationOutcome | None:
        sub_values = value.value if value is not None and value.type == "composite" else {}

        outcomes = []
        for sub in question.sub_questions:
            sub_value = sub_values.get(sub.id)
            if sub_value is not None and sub_value.type != sub.expected_value_type:
                # Tipo divergente dentro do composto nunca pontua
                outcome = ValidationOutcome.incorrect() if self.is_evaluable(sub) else None
            else:
                outcome = self._validate(sub, sub_value, depth + 1, ancestry)

            if outcome is not None:
                outcomes.append(outcome)

        if not outcomes:
            return None

        fraction = sum(o.score for o in outcomes) / len(outcomes)
        return ValidationOutcome(
            is_correct=all(o.is_correct for o in outcomes),
            score=fraction,
        )

    # -------------------------------------------------------------------------
    # Agregados
    # -------------------------------------------------------------------------

    @staticmethod
    def total_score(answers: Iterable[Answer]) -> float:
        """Soma dos scores dos Answers avaliados."""
        return sum(a.score for a in answers if a.evaluated)

    @staticmethod
    def summarize(answers: Iterable[Answer]) -> dict:
        """Resumo da tentativa (sem mapeamento para notas/rankings).

        Returns:
            Dict com answered, evaluated, correct_answers, score, max_score e percentage
        """
        answers = list(answers)
        evaluated = [a for a in answers if a.evaluated]
        score = sum(a.score for a in evaluated)
        max_score = sum(a.max_score for a in evaluated)
        percentage = (score / max_score * 100) if max_score > 0 else 0.0

        return {
            "answered": len(answers),
            "evaluated": len(evaluated),
            "correct_answers": sum(1 for a in evaluated if a.is_correct),
            "score": score,
            "max_score": max_score,
            "percentage": round(percentage, 1),
        }
