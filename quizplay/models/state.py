"""Quiz State - Estado mutavel de uma tentativa."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .enums import QuizStatus
from .questions import BaseQuestion
from .schemas import Answer

if TYPE_CHECKING:
    from ..loader.base import QuestionLoader


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class QuizState:
    """Estado completo de uma tentativa em andamento.

    Attributes:
        quiz_id: ID unico da tentativa
        questions: Sequencia materializada (ou cache de prefetch quando ha loader)
        question_loader: Fornecedor paginado; quando presente e autoritativo
        current_question_index: Cursor da tentativa
        score: Pontuacao corrente (soma dos Answers avaliados)
        user_answers: question_id -> Answer, na ordem de submissao
        answer_history: Todos os Answers ja criados (append-only, para auditoria)
        status: Estado do ciclo de vida
        start_time: Inicio da tentativa
        end_time: Fim da tentativa
        skipped_question_ids: Questoes puladas sem resposta
        visited_indices: Posicoes logicas ja exibidas
        paused_seconds: Tempo total em pausa
        metadata: Dados livres (user_id, etc)
    """

    quiz_id: str
    questions: list[BaseQuestion] | None = None
    question_loader: QuestionLoader | None = None
    current_question_index: int = 0
    score: float = 0.0
    user_answers: dict[str, Answer] = field(default_factory=dict)
    answer_history: list[Answer] = field(default_factory=list)
    status: QuizStatus = QuizStatus.NOT_STARTED
    start_time: datetime | None = None
    end_time: datetime | None = None
    paused_at: datetime | None = None
    paused_seconds: float = 0.0
    skipped_question_ids: list[str] = field(default_factory=list)
    visited_indices: set[int] = field(default_factory=set)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        from ..exceptions import QuizStateCorruptedError

        if self.questions is None and self.question_loader is None:
            raise QuizStateCorruptedError(
                "QuizState exige questions ou question_loader",
                details={"quiz_id": self.quiz_id},
            )

    @property
    def is_completed(self) -> bool:
        return self.status == QuizStatus.COMPLETED

    @property
    def uses_loader(self) -> bool:
        return self.question_loader is not None

    def record_answer(self, answer: Answer) -> None:
        """Registra um Answer, substituindo o anterior da mesma questao."""
        # pop + set mantem a ordem de iteracao igual a ordem de submissao
        self.user_answers.pop(answer.question_id, None)
        self.user_answers[answer.question_id] = answer
        self.answer_history.append(answer)
        if answer.question_id in self.skipped_question_ids:
            self.skipped_question_ids.remove(answer.question_id)

    def mark_skipped(self, question_id: str) -> None:
        if question_id not in self.user_answers and question_id not in self.skipped_question_ids:
            self.skipped_question_ids.append(question_id)

    def is_answered(self, question_id: str) -> bool:
        return question_id in self.user_answers

    def elapsed_seconds(self, now: datetime | None = None) -> float:
        """Tempo de jogo, descontando pausas."""
        if self.start_time is None:
            return 0.0
        end = self.end_time or self.paused_at or now or utcnow()
        return max(0.0, (end - self.start_time).total_seconds() - self.paused_seconds)

    def to_dict(self) -> dict[str, Any]:
        """Converte para dicionario (para persistencia)."""
        return {
            "quiz_id": self.quiz_id,
            "status": self.status.value,
            "current_question_index": self.current_question_index,
            "score": self.score,
            "is_completed": self.is_completed,
            "user_answers": {
                qid: answer.model_dump(mode="json") for qid, answer in self.user_answers.items()
            },
            "answer_history": [a.model_dump(mode="json") for a in self.answer_history],
            "skipped_question_ids": list(self.skipped_question_ids),
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "elapsed_seconds": round(self.elapsed_seconds(), 3),
            "total_questions": (
                self.question_loader.total_questions
                if self.question_loader is not None
                else len(self.questions or [])
            ),
            "metadata": dict(self.metadata),
        }
