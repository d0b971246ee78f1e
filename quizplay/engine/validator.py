"""Answer Validator - Comparacao de respostas por tipo de valor.

Despacho central por ``type`` do AnswerValue. Scores sao fracoes (0-1); a
conversao para pontos fica no QuizScoringEngine.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Protocol, runtime_checkable

from ..config import QuizConfig
from ..models.schemas import ValidationOutcome
from ..models.values import LabelPlacement, Point

logger = logging.getLogger(__name__)

# Margem para comparacoes de distancia em ponto flutuante
_EPSILON = 1e-9


@runtime_checkable
class AnswerValidatorProtocol(Protocol):
    """Contrato de validadores (default ou customizados por questao)."""

    def validate(self, user_value: Any, correct_value: Any) -> ValidationOutcome: ...


def coerce_outcome(raw: Any) -> ValidationOutcome:
    """Normaliza o retorno de validadores customizados.

    Aceita ValidationOutcome, mapping {is_correct, score} ou bool.
    """
    if isinstance(raw, ValidationOutcome):
        return raw
    if isinstance(raw, bool):
        return ValidationOutcome.correct() if raw else ValidationOutcome.incorrect()
    if isinstance(raw, dict):
        is_correct = bool(raw.get("is_correct", raw.get("isCorrect", False)))
        score = raw.get("score", 1.0 if is_correct else 0.0)
        return ValidationOutcome(is_correct=is_correct, score=min(1.0, max(0.0, float(score))))
    raise TypeError(f"Retorno de validador nao suportado: {type(raw).__name__}")


def normalize_word(word: str) -> str:
    return word.strip().casefold()


def max_matching(
    expected: Sequence[Any],
    submitted: Sequence[Any],
    accepts: Callable[[Any, Any], bool],
) -> int:
    """Tamanho do emparelhamento maximo entre esperados e enviados.

    Cada item enviado cobre no maximo um esperado; ``accepts(esperado, enviado)``
    define as arestas. Caminhos aumentantes garantem que a ordem de envio
    nao altera o resultado.
    """
    edges = [
        [j for j, item in enumerate(submitted) if accepts(want, item)]
        for want in expected
    ]
    owner: dict[int, int] = {}

    def augment(i: int, seen: set[int]) -> bool:
        for j in edges[i]:
            if j in seen:
                continue
            seen.add(j)
            if j not in owner or augment(owner[j], seen):
                owner[j] = i
                return True
        return False

    return sum(1 for i in range(len(expected)) if augment(i, set()))


class AnswerValidator:
    """Validador padrao para todas as variantes objetivas.

    Regras por tipo:
        - text/number/boolean/canvas/media: igualdade exata
        - coordinates: distancia <= coordinate_tolerance
        - array-reorder: sequencia exata (sensivel a ordem)
        - array-match/drag-and-drop/categorize: igualdade de conjuntos de pares
        - array-labeling: label_id igual e posicao dentro da tolerancia
        - array-graphing: pareamento pelo ponto mais proximo dentro da tolerancia
        - array-word-cloud: sobreposicao de conjuntos normalizados

    Example:
        >>> validator = AnswerValidator(QuizConfig(partial_credit_enabled=True))
        >>> outcome = validator.validate(user_value, question.correct_answer)
        >>> outcome.score
        0.5
    """

    def __init__(self, config: QuizConfig | None = None):
        self.config = config or QuizConfig()

    @property
    def tolerance(self) -> float:
        return self.config.coordinate_tolerance

    def validate(self, user_value: Any, correct_value: Any) -> ValidationOutcome:
        """Compara a resposta do usuario com o gabarito.

        Args:
            user_value: AnswerValue submetido
            correct_value: AnswerValue do gabarito

        Returns:
            ValidationOutcome com is_correct e score fracionario
        """
        if user_value is None or correct_value is None:
            return ValidationOutcome.incorrect()

        if user_value.type != correct_value.type:
            logger.debug(
                f"Tipo divergente: recebido '{user_value.type}', esperado '{correct_value.type}'"
            )
            return ValidationOutcome.incorrect()

        match user_value.type:
            case "text" | "number" | "boolean" | "canvas" | "media":
                return self._exact(user_value.value == correct_value.value)
            case "coordinates":
                return self._exact(self._within(user_value.value, correct_value.value))
            case "array-reorder":
                return self._exact(tuple(user_value.value) == tuple(correct_value.value))
            case "array-match" | "array-drag-and-drop" | "array-categorize":
                return self._score_pairs(correct_value.value, user_value.value)
            case "array-labeling":
                return self._score_labels(correct_value.value, user_value.value)
            case "array-graphing":
                return self._score_points(correct_value.value, user_value.value)
            case "array-word-cloud":
                return self.score_word_overlap(correct_value.value, user_value.value)
            case _:
                # composite nao tem validacao direta: agregado no scoring engine
                return ValidationOutcome.incorrect()

    # -------------------------------------------------------------------------
    # Regras
    # -------------------------------------------------------------------------

    @staticmethod
    def _exact(matches: bool) -> ValidationOutcome:
        return ValidationOutcome.correct() if matches else ValidationOutcome.incorrect()

    def _within(self, a: Point, b: Point) -> bool:
        return a.distance_to(b) <= self.tolerance + _EPSILON

    def _partial(self, matched: int, expected: int, submitted: int) -> ValidationOutcome:
        if matched == expected == submitted:
            return ValidationOutcome.correct()
        if not self.config.partial_credit_enabled:
            return ValidationOutcome.incorrect()
        total = max(expected, submitted)
        return ValidationOutcome(is_correct=False, score=matched / total if total else 0.0)

    def _score_pairs(self, expected: Iterable[Any], submitted: Iterable[Any]) -> ValidationOutcome:
        expected_counts = Counter(expected)
        submitted_counts = Counter(submitted)
        matched = sum((expected_counts & submitted_counts).values())
        return self._partial(
            matched,
            sum(expected_counts.values()),
            sum(submitted_counts.values()),
        )

    def _score_labels(
        self,
        expected: Iterable[LabelPlacement],
        submitted: Iterable[LabelPlacement],
    ) -> ValidationOutcome:
        expected_list = list(expected)
        submitted_list = list(submitted)
        matched = max_matching(
            expected_list,
            submitted_list,
            lambda want, got: want.label_id == got.label_id
            and self._within(got.position, want.position),
        )
        return self._partial(matched, len(expected_list), len(submitted_list))

    def _score_points(self, expected: Iterable[Point], submitted: Iterable[Point]) -> ValidationOutcome:
        expected_list = list(expected)
        submitted_list = list(submitted)
        matched = max_matching(expected_list, submitted_list, self._within)

        total = max(len(expected_list), len(submitted_list))
        if total == 0 or (matched == len(expected_list) == len(submitted_list)):
            return ValidationOutcome.correct()
        return ValidationOutcome(is_correct=False, score=matched / total)

    @staticmethod
    def score_word_overlap(expected: Iterable[str], submitted: Iterable[str]) -> ValidationOutcome:
        """Sobreposicao (Jaccard) entre conjuntos de palavras normalizadas."""
        expected_set = {normalize_word(w) for w in expected} - {""}
        submitted_set = {normalize_word(w) for w in submitted} - {""}

        if expected_set == submitted_set:
            return ValidationOutcome.correct()

        union = expected_set | submitted_set
        return ValidationOutcome(
            is_correct=False,
            score=len(expected_set & submitted_set) / len(union),
        )


class SetOverlapValidator:
    """Validador anexavel a WORD_CLOUD: pontua a sobreposicao de palavras."""

    def validate(self, user_value: Any, correct_value: Any) -> ValidationOutcome:
        if user_value is None or correct_value is None:
            return ValidationOutcome.incorrect()
        if user_value.type != "array-word-cloud" or correct_value.type != "array-word-cloud":
            return ValidationOutcome.incorrect()
        return AnswerValidator.score_word_overlap(correct_value.value, user_value.value)
