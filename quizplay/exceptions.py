"""Quiz Exceptions - Taxonomia de erros do engine.

Todas as excecoes (exceto QuizStateCorruptedError) sao capturadas na
fronteira de cada operacao do QuizGame e convertidas em OperationResult,
mantendo a tentativa retomavel.
"""

from __future__ import annotations

from typing import Any

from .models.enums import ErrorCode


class QuizError(Exception):
    """Erro base do engine de quiz."""

    code: ErrorCode | None = None

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Converte para dicionario (para respostas de API)."""
        return {
            "code": self.code.value if self.code else None,
            "message": self.message,
            "details": self.details,
        }


class InvalidStateTransitionError(QuizError):
    """Operacao tentada no estado errado do ciclo de vida."""

    code = ErrorCode.INVALID_STATE_TRANSITION


class UnknownQuestionError(QuizError):
    """question_id ausente no conjunto (ou pagina) atual."""

    code = ErrorCode.UNKNOWN_QUESTION


class AnswerTypeMismatchError(QuizError):
    """Tag do valor submetido difere da esperada pela questao."""

    code = ErrorCode.ANSWER_TYPE_MISMATCH


class NavigationBoundaryError(QuizError):
    """Navegacao alem do inicio ou do fim do quiz."""

    code = ErrorCode.NAVIGATION_BOUNDARY


class LoaderFailureError(QuizError):
    """Falha (ou dado malformado) na busca paginada de questoes."""

    code = ErrorCode.LOADER_FAILURE


class RecursionLimitExceededError(QuizError):
    """Aninhamento de questoes compostas profundo demais (ou ciclico)."""

    code = ErrorCode.RECURSION_LIMIT_EXCEEDED


class ValidatorFailureError(QuizError):
    """Validador customizado levantou erro ou retornou resultado invalido."""

    code = ErrorCode.VALIDATOR_FAILURE


class QuizStateCorruptedError(QuizError):
    """QuizState estruturalmente invalido. Fatal, levantado na construcao."""
