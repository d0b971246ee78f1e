"""Quiz Schemas - Modelos Pydantic compartilhados (opcoes, respostas, resultados)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import DifficultyLevel, ErrorCode
from .values import AnswerValue, LocalizedText, OptionValue


class Option(BaseModel):
    """Unidade selecionavel/ordenavel (alternativa, item, alvo, hotspot, ponto)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="ID da opcao")
    value: OptionValue = Field(..., description="Valor tipado da opcao")
    label: LocalizedText | None = Field(default=None, description="Rotulo exibido")


class QuestionMetadata(BaseModel):
    """Metadata educacional da questao."""

    difficulty: DifficultyLevel | None = None
    points: float = Field(default=1.0, ge=0, description="Peso da questao")
    time_limit: int | None = Field(default=None, description="Limite em segundos")
    tags: list[str] = Field(default_factory=list)
    hint: LocalizedText | None = None


class Answer(BaseModel):
    """Resposta registrada pelo engine.

    Imutavel: uma nova submissao cria um novo Answer. Os campos de
    corretude (is_correct, score, max_score, evaluated) sao preenchidos
    apenas pelo engine.
    """

    model_config = ConfigDict(frozen=True)

    question_id: str
    value: AnswerValue
    is_correct: bool = False
    score: float = 0.0
    max_score: float = 0.0
    evaluated: bool = False
    submitted_at: datetime | None = None
    time_spent: float | None = Field(default=None, description="Tempo gasto em segundos")


class ValidationOutcome(BaseModel):
    """Resultado de uma validacao: score e a fracao obtida (0-1)."""

    model_config = ConfigDict(frozen=True)

    is_correct: bool
    score: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def correct(cls) -> ValidationOutcome:
        return cls(is_correct=True, score=1.0)

    @classmethod
    def incorrect(cls) -> ValidationOutcome:
        return cls(is_correct=False, score=0.0)


class OperationResult(BaseModel):
    """Resultado de uma operacao do QuizGame.

    Operacoes rejeitadas retornam success=False com error/code e deixam o
    estado inalterado.
    """

    success: bool
    error: str | None = None
    code: ErrorCode | None = None
    answer: Answer | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, answer: Answer | None = None) -> OperationResult:
        return cls(success=True, answer=answer)

    @classmethod
    def from_error(cls, exc: Exception) -> OperationResult:
        return cls(
            success=False,
            error=getattr(exc, "message", str(exc)),
            code=getattr(exc, "code", None),
            details=getattr(exc, "details", {}),
        )
