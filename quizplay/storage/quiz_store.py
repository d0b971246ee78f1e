"""Quiz Store - Persistencia de snapshots de tentativas em um KV assincrono."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..models.schemas import Answer

logger = logging.getLogger(__name__)


class KVBackend(Protocol):
    """Qualquer objeto com um atributo ``kv`` exposto por get/set/delete async."""

    kv: Any


class QuizStore:
    """Persistencia de tentativas sobre um backend KV assincrono.

    O engine nao depende do store: a camada HTTP salva o snapshot ao final
    da tentativa (e opcionalmente a cada resposta).

    Estrutura de chaves:
        - quiz:{quiz_id}:state -> Snapshot completo (QuizGame.snapshot())
        - quiz:{quiz_id}:answers:{question_id} -> Answer individual (backup)

    Example:
        >>> store = QuizStore(backend)
        >>> await store.save_snapshot(game.snapshot())
        >>> data = await store.load_snapshot(game.state.quiz_id)
    """

    KEY_PREFIX = "quiz"

    def __init__(self, backend: KVBackend):
        self.backend = backend

    def _state_key(self, quiz_id: str) -> str:
        return f"{self.KEY_PREFIX}:{quiz_id}:state"

    def _answer_key(self, quiz_id: str, question_id: str) -> str:
        return f"{self.KEY_PREFIX}:{quiz_id}:answers:{question_id}"

    async def save_snapshot(self, snapshot: dict[str, Any]) -> None:
        """Persiste o snapshot completo e os backups das respostas.

        Args:
            snapshot: Dict gerado por QuizGame.snapshot() ou QuizState.to_dict()
        """
        quiz_id = snapshot["quiz_id"]
        await self.backend.kv.set(self._state_key(quiz_id), snapshot)

        for question_id, answer in snapshot.get("user_answers", {}).items():
            await self.backend.kv.set(self._answer_key(quiz_id, question_id), answer)

        logger.debug(f"Snapshot salvo: {quiz_id} ({len(snapshot.get('user_answers', {}))} respostas)")

    async def save_answer(self, quiz_id: str, answer: Answer) -> None:
        """Backup individual de uma resposta recem registrada."""
        key = self._answer_key(quiz_id, answer.question_id)
        await self.backend.kv.set(key, answer.model_dump(mode="json"))

    async def load_snapshot(self, quiz_id: str) -> dict[str, Any] | None:
        """Carrega o snapshot salvo.

        Returns:
            Dict do snapshot se encontrado, None caso contrario
        """
        data = await self.backend.kv.get(self._state_key(quiz_id))
        if not data:
            logger.debug(f"Snapshot nao encontrado: {quiz_id}")
            return None
        return data

    async def load_answer(self, quiz_id: str, question_id: str) -> Answer | None:
        data = await self.backend.kv.get(self._answer_key(quiz_id, question_id))
        if not data:
            return None
        return Answer.model_validate(data)

    async def delete_quiz(self, quiz_id: str) -> None:
        """Remove snapshot e backups de respostas conhecidos pelo snapshot."""
        snapshot = await self.load_snapshot(quiz_id)
        if snapshot is not None:
            for question_id in snapshot.get("user_answers", {}):
                await self.backend.kv.delete(self._answer_key(quiz_id, question_id))

        await self.backend.kv.delete(self._state_key(quiz_id))
        logger.info(f"Quiz deletado: {quiz_id}")
