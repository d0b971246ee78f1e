"""Quiz Router - Endpoints FastAPI sobre o QuizGame."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import QuizConfig
from .engine.quiz_game import QuizGame
from .localization import resolve_text
from .models.enums import ErrorCode
from .models.questions import Question
from .models.schemas import Answer, OperationResult
from .models.values import AnswerValue
from .storage.quiz_store import QuizStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz/attempts", tags=["Quiz"])

# =============================================================================
# IN-MEMORY REGISTRY
# =============================================================================

# Tentativas ativas (quiz_id -> QuizGame)
_attempts: dict[str, QuizGame] = {}

# Store opcional para snapshots finais
_store: QuizStore | None = None

_config: QuizConfig | None = None

ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_STATE_TRANSITION: 409,
    ErrorCode.NAVIGATION_BOUNDARY: 409,
    ErrorCode.UNKNOWN_QUESTION: 404,
    ErrorCode.ANSWER_TYPE_MISMATCH: 422,
    ErrorCode.RECURSION_LIMIT_EXCEEDED: 422,
    ErrorCode.VALIDATOR_FAILURE: 422,
    ErrorCode.LOADER_FAILURE: 502,
}


def configure_store(store: QuizStore | None) -> None:
    """Define o store usado para persistir snapshots (None desativa)."""
    global _store
    _store = store


def get_store() -> QuizStore | None:
    return _store


def get_config() -> QuizConfig:
    """Dependency para obter a configuracao base (carregada do ambiente)."""
    global _config
    if _config is None:
        _config = QuizConfig.from_env()
    return _config


def get_attempt(quiz_id: str) -> QuizGame:
    """Dependency para obter a tentativa pelo ID."""
    game = _attempts.get(quiz_id)
    if game is None:
        raise HTTPException(status_code=404, detail=f"Tentativa {quiz_id} nao encontrada")
    return game


def clear_attempts() -> None:
    _attempts.clear()


# =============================================================================
# REQUEST / RESPONSE MODELS
# =============================================================================


class CreateAttemptRequest(BaseModel):
    """Cria uma tentativa sobre um conjunto materializado de questoes."""

    questions: list[Question] = Field(..., description="Questoes da tentativa")
    quiz_id: str | None = Field(default=None, description="ID desejado (gerado se ausente)")
    partial_credit_enabled: bool | None = None
    coordinate_tolerance: float | None = Field(default=None, ge=0)
    allow_out_of_order_submission: bool | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class CreateAttemptResponse(BaseModel):
    quiz_id: str
    total_questions: int
    total_points_possible: float
    status: str


class SubmitAnswerRequest(BaseModel):
    question_id: str
    value: AnswerValue
    time_spent: float | None = Field(default=None, ge=0, description="Segundos")


class OperationResponse(BaseModel):
    success: bool
    status: str
    current_question_index: int
    score: float
    answer: Answer | None = None


# =============================================================================
# HELPERS
# =============================================================================


def _respond(game: QuizGame, result: OperationResult):
    if not result.success:
        status_code = ERROR_STATUS.get(result.code, 400) if result.code else 400
        return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))

    return OperationResponse(
        success=True,
        status=game.status.value,
        current_question_index=game.state.current_question_index,
        score=game.state.score,
        answer=result.answer,
    )


# =============================================================================
# LIFECYCLE ENDPOINTS
# =============================================================================


@router.post("", response_model=CreateAttemptResponse, status_code=201)
async def create_attempt(
    request: CreateAttemptRequest,
    base_config: QuizConfig = Depends(get_config),
):
    """Cria uma tentativa NOT_STARTED.

    Opcoes ausentes herdam a configuracao do ambiente (QUIZ_*).
    """
    if request.quiz_id and request.quiz_id in _attempts:
        raise HTTPException(status_code=409, detail=f"Tentativa {request.quiz_id} ja existe")

    overrides = {
        name: getattr(request, name)
        for name in ("partial_credit_enabled", "coordinate_tolerance", "allow_out_of_order_submission")
        if getattr(request, name) is not None
    }
    config = dataclasses.replace(base_config, **overrides)

    game = QuizGame.from_questions(request.questions, quiz_id=request.quiz_id, config=config)
    game.state.metadata.update(request.metadata)
    _attempts[game.state.quiz_id] = game

    logger.info(f"[Quiz {game.state.quiz_id}] Tentativa criada ({game.total_questions} questoes)")

    return CreateAttemptResponse(
        quiz_id=game.state.quiz_id,
        total_questions=game.total_questions,
        total_points_possible=game.state.metadata.get("total_points_possible", 0.0),
        status=game.status.value,
    )


@router.post("/{quiz_id}/start")
async def start_attempt(game: QuizGame = Depends(get_attempt)):
    return _respond(game, await game.start_quiz())


@router.post("/{quiz_id}/pause")
async def pause_attempt(game: QuizGame = Depends(get_attempt)):
    return _respond(game, await game.pause_quiz())


@router.post("/{quiz_id}/resume")
async def resume_attempt(game: QuizGame = Depends(get_attempt)):
    return _respond(game, await game.resume_quiz())


@router.post("/{quiz_id}/end")
async def end_attempt(game: QuizGame = Depends(get_attempt)):
    """Finaliza a tentativa e persiste o snapshot (se houver store)."""
    result = await game.end_quiz()

    if result.success and _store is not None:
        await _store.save_snapshot(game.snapshot())
        logger.info(f"[Quiz {game.state.quiz_id}] Snapshot final persistido")

    return _respond(game, result)


# =============================================================================
# ANSWER & NAVIGATION ENDPOINTS
# =============================================================================


@router.post("/{quiz_id}/answers")
async def submit_answer(
    request: SubmitAnswerRequest,
    game: QuizGame = Depends(get_attempt),
):
    """Registra uma resposta.

    - 404 se a questao nao existe (ou nao e a atual)
    - 422 se a tag do valor difere da esperada
    - 409 fora de IN_PROGRESS
    """
    if request.time_spent is not None:
        payload: Any = Answer(
            question_id=request.question_id,
            value=request.value,
            time_spent=request.time_spent,
        )
    else:
        payload = request.value

    result = await game.submit_answer(request.question_id, payload)

    if result.success and _store is not None and result.answer is not None:
        await _store.save_answer(game.state.quiz_id, result.answer)

    return _respond(game, result)


@router.post("/{quiz_id}/next")
async def next_question(game: QuizGame = Depends(get_attempt)):
    return _respond(game, await game.next_question())


@router.post("/{quiz_id}/previous")
async def previous_question(game: QuizGame = Depends(get_attempt)):
    return _respond(game, await game.previous_question())


@router.post("/{quiz_id}/skip")
async def skip_question(game: QuizGame = Depends(get_attempt)):
    return _respond(game, await game.skip_question())


@router.post("/{quiz_id}/shuffle")
async def shuffle_questions(game: QuizGame = Depends(get_attempt)):
    return _respond(game, await game.shuffle_questions())


# =============================================================================
# QUERY ENDPOINTS
# =============================================================================


@router.get("/{quiz_id}/current")
async def get_current_question(
    lang: str | None = None,
    game: QuizGame = Depends(get_attempt),
):
    """Questao no cursor (null fora de jogo)."""
    question = await game.get_current_question()
    if question is None:
        return {"index": None, "question": None, "display_text": None}

    return {
        "index": game.state.current_question_index,
        "question": question.model_dump(mode="json"),
        "display_text": resolve_text(question.text, lang),
    }


@router.get("/{quiz_id}/score")
async def get_score(game: QuizGame = Depends(get_attempt)):
    summary = game.scoring.summarize(game.state.user_answers.values())
    return {
        "quiz_id": game.state.quiz_id,
        "status": game.status.value,
        "score": game.calculate_score(),
        "total_points_possible": game.state.metadata.get("total_points_possible"),
        **{k: v for k, v in summary.items() if k != "score"},
    }


@router.get("/{quiz_id}/hint/{question_id}")
async def get_hint(
    question_id: str,
    lang: str | None = None,
    game: QuizGame = Depends(get_attempt),
):
    hint = game.get_hint(question_id)
    return {"question_id": question_id, "hint": resolve_text(hint, lang)}


@router.get("/{quiz_id}/snapshot")
async def get_snapshot(game: QuizGame = Depends(get_attempt)):
    return game.snapshot()
