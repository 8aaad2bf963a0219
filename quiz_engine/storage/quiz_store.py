"""Quiz Store - Persistencia de quizzes e tentativas sobre um KV assincrono."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..errors import AttemptNotFoundError, QuizNotFoundError
from ..models.schemas import Attempt, Quiz

logger = logging.getLogger(__name__)


class AsyncKV(Protocol):
    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def list(self, prefix: str = "") -> list[Any]: ...


class QuizStore:
    """Abstracao sobre um KV assincrono para quizzes e tentativas.

    O engine nao persiste nada: este store e o colaborador que grava o
    que o engine devolve. Os registros sao ``model_dump(mode="json")``
    dos modelos, um para um.

    Estrutura de chaves:
        - quiz:{quiz_id}:definition -> Quiz
        - quiz:{quiz_id}:attempt:{attempt_id} -> indice (user_id)
        - attempt:{attempt_id} -> Attempt

    Example:
        >>> store = QuizStore(MemoryKV())
        >>> await store.save_quiz(quiz)
        >>> loaded = await store.load_quiz(quiz.id)
    """

    QUIZ_PREFIX = "quiz"
    ATTEMPT_PREFIX = "attempt"

    def __init__(self, kv: AsyncKV):
        """Inicializa store com um KV (MemoryKV, ``agentfs.kv``...)."""
        self.kv = kv

    def _quiz_key(self, quiz_id: str) -> str:
        return f"{self.QUIZ_PREFIX}:{quiz_id}:definition"

    def _attempt_key(self, attempt_id: str) -> str:
        return f"{self.ATTEMPT_PREFIX}:{attempt_id}"

    def _attempt_index_key(self, quiz_id: str, attempt_id: str) -> str:
        return f"{self.QUIZ_PREFIX}:{quiz_id}:attempt:{attempt_id}"

    # -------------------------------------------------------------------------
    # Quizzes
    # -------------------------------------------------------------------------

    async def save_quiz(self, quiz: Quiz) -> None:
        await self.kv.set(self._quiz_key(quiz.id), quiz.model_dump(mode="json"))
        logger.debug(f"Quiz salvo: {quiz.id}")

    async def load_quiz(self, quiz_id: str) -> Quiz | None:
        data = await self.kv.get(self._quiz_key(quiz_id))
        if not data:
            logger.debug(f"Quiz nao encontrado: {quiz_id}")
            return None
        return Quiz.model_validate(data)

    async def get_quiz(self, quiz_id: str) -> Quiz:
        """Como ``load_quiz``, mas levanta QuizNotFoundError."""
        quiz = await self.load_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(quiz_id)
        return quiz

    async def list_quizzes(self) -> list[str]:
        entries = await self.kv.list(prefix=f"{self.QUIZ_PREFIX}:")
        quiz_ids = set()
        for entry in entries:
            key = entry.get("key", "") if isinstance(entry, dict) else str(entry)
            parts = key.split(":")
            if len(parts) == 3 and parts[2] == "definition":
                quiz_ids.add(parts[1])
        return sorted(quiz_ids)

    async def delete_quiz(self, quiz_id: str) -> None:
        """Remove o quiz e todas as suas tentativas."""
        for attempt_id in await self._attempt_ids(quiz_id):
            await self.kv.delete(self._attempt_key(attempt_id))
            await self.kv.delete(self._attempt_index_key(quiz_id, attempt_id))
        await self.kv.delete(self._quiz_key(quiz_id))
        logger.info(f"Quiz deletado: {quiz_id}")

    # -------------------------------------------------------------------------
    # Tentativas
    # -------------------------------------------------------------------------

    async def save_attempt(self, attempt: Attempt) -> None:
        await self.kv.set(self._attempt_key(attempt.id), attempt.model_dump(mode="json"))
        await self.kv.set(
            self._attempt_index_key(attempt.quiz_id, attempt.id), {"user_id": attempt.user_id}
        )
        logger.debug(f"Tentativa salva: {attempt.id} ({attempt.status.value})")

    async def load_attempt(self, attempt_id: str) -> Attempt | None:
        data = await self.kv.get(self._attempt_key(attempt_id))
        if not data:
            return None
        return Attempt.model_validate(data)

    async def get_attempt(self, attempt_id: str) -> Attempt:
        attempt = await self.load_attempt(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(attempt_id)
        return attempt

    async def list_attempts(self, quiz_id: str, user_id: str | None = None) -> list[Attempt]:
        """Tentativas do quiz (opcionalmente de um usuario), por data de inicio."""
        attempts = []
        for attempt_id in await self._attempt_ids(quiz_id):
            attempt = await self.load_attempt(attempt_id)
            if attempt is None:
                logger.warning(f"Indice aponta para tentativa inexistente: {attempt_id}")
                continue
            if user_id is None or attempt.user_id == user_id:
                attempts.append(attempt)
        return sorted(attempts, key=lambda a: a.started_at)

    async def _attempt_ids(self, quiz_id: str) -> list[str]:
        prefix = f"{self.QUIZ_PREFIX}:{quiz_id}:attempt:"
        entries = await self.kv.list(prefix=prefix)
        ids = []
        for entry in entries:
            key = entry.get("key", "") if isinstance(entry, dict) else str(entry)
            ids.append(key[len(prefix):])
        return ids
