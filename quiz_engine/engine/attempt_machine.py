"""Attempt State Machine - Ciclo de vida de uma tentativa.

    NOT_STARTED -> IN_PROGRESS -> {SUBMITTED | EXPIRED} -> GRADED
                   IN_PROGRESS -> ABANDONED

SUBMITTED e EXPIRED resolvem para GRADED na mesma chamada; o gatilho fica
em ``Attempt.submit_reason``. Estados terminais recusam qualquer evento
com ``IllegalTransitionError``.
"""

from __future__ import annotations

import logging
import random
import threading
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..errors import (
    AttemptRejected,
    IllegalTransitionError,
    InvalidAnswerValueError,
    UnknownQuestionError,
)
from ..models.enums import AttemptStatus, RejectionReason, SubmitReason
from ..models.questions import MultipleChoiceQuestion, MultipleSelectQuestion
from ..models.schemas import Answer, AnswerValue, Attempt, Quiz
from .grading_engine import QuizGradingEngine

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_answer_value: TypeAdapter[AnswerValue] = TypeAdapter(AnswerValue)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttemptStateMachine:
    """Transicoes puras sobre ``Attempt`` imutavel.

    Cada metodo recebe a tentativa atual e devolve uma nova instancia;
    a original nunca e alterada. A persistencia fica com o chamador.
    """

    def __init__(self, grading: QuizGradingEngine | None = None, clock: Clock = utcnow):
        self.grading = grading or QuizGradingEngine()
        self.clock = clock

    # -------------------------------------------------------------------------
    # Inicio
    # -------------------------------------------------------------------------

    def check_start_eligibility(
        self, quiz: Quiz, user_id: str, prior_attempts: Iterable[Attempt]
    ) -> RejectionReason | None:
        """Retorna o motivo de recusa, ou None se a tentativa pode comecar.

        Apenas tentativas finalizadas do mesmo (quiz, usuario) contam para
        o limite; abertas ou abandonadas nao consomem tentativa.
        """
        if not quiz.is_published:
            return RejectionReason.QUIZ_NOT_PUBLISHED
        if not quiz.questions:
            return RejectionReason.NO_QUESTIONS

        finished = _finalized_for(prior_attempts, quiz.id, user_id)
        settings = quiz.settings

        if not settings.allow_multiple_attempts and finished:
            return RejectionReason.MULTIPLE_ATTEMPTS_DISABLED
        if settings.max_attempts is not None and len(finished) >= settings.max_attempts:
            return RejectionReason.MAX_ATTEMPTS_REACHED
        return None

    def start(
        self,
        quiz: Quiz,
        user_id: str,
        prior_attempts: Iterable[Attempt] = (),
        *,
        attempt_id: str | None = None,
        rng: random.Random | None = None,
    ) -> Attempt:
        """Cria a tentativa com todas as respostas vazias.

        Raises:
            AttemptRejected: politica de tentativas recusou o inicio
        """
        prior_attempts = list(prior_attempts)
        reason = self.check_start_eligibility(quiz, user_id, prior_attempts)
        if reason is not None:
            logger.info(
                f"Tentativa recusada para usuario {user_id} no quiz {quiz.id}: {reason.value}",
                extra={"event_type": "attempt_rejected", "quiz_id": quiz.id, "reason": reason.value},
            )
            raise AttemptRejected(reason)

        rng = rng or random.Random()
        question_order = [q.id for q in quiz.questions]
        if quiz.settings.randomize_questions:
            rng.shuffle(question_order)

        option_order: dict[str, tuple[str, ...]] = {}
        if quiz.settings.randomize_options:
            for question in quiz.questions:
                if isinstance(question, (MultipleChoiceQuestion, MultipleSelectQuestion)):
                    ids = list(question.option_ids)
                    rng.shuffle(ids)
                    option_order[question.id] = tuple(ids)

        previous = [
            a for a in prior_attempts if a.quiz_id == quiz.id and a.user_id == user_id
        ]
        attempt = Attempt(
            id=attempt_id or str(uuid.uuid4()),
            quiz_id=quiz.id,
            user_id=user_id,
            attempt_number=len(previous) + 1,
            status=AttemptStatus.IN_PROGRESS,
            started_at=self.clock(),
            answers=tuple(
                Answer(question_id=q.id, question_type=q.type) for q in quiz.questions
            ),
            elapsed_seconds=0,
            time_limit_seconds=quiz.time_limit_seconds,
            question_order=tuple(question_order),
            option_order=option_order,
            total_points=quiz.total_points,
        )

        logger.info(
            f"[Tentativa {attempt.id}] Iniciada por {user_id} no quiz {quiz.id} "
            f"(tentativa #{attempt.attempt_number})",
            extra={"event_type": "attempt_started", "attempt_id": attempt.id, "quiz_id": quiz.id},
        )
        return attempt

    # -------------------------------------------------------------------------
    # Eventos durante IN_PROGRESS
    # -------------------------------------------------------------------------

    def record_answer(self, attempt: Attempt, question_id: str, value: Any) -> Attempt:
        """Sobrescreve o slot da questao (quantas vezes quiser)."""
        self._ensure_open(attempt, "answer")
        value = _coerce_value(attempt, question_id, value)

        answers = list(attempt.answers)
        for index, answer in enumerate(answers):
            if answer.question_id == question_id:
                answers[index] = answer.model_copy(
                    update={"value": value, "answered_at": self.clock()}
                )
                return attempt.model_copy(update={"answers": tuple(answers)})

        raise UnknownQuestionError(attempt.id, question_id)

    def tick(self, attempt: Attempt, quiz: Quiz) -> Attempt:
        """Avanca um segundo; finaliza como EXPIRED ao atingir o limite."""
        self._ensure_open(attempt, "tick")

        updated = attempt.model_copy(update={"elapsed_seconds": attempt.elapsed_seconds + 1})
        limit = _time_limit(attempt, quiz)
        if limit is not None and updated.elapsed_seconds >= limit:
            logger.info(
                f"[Tentativa {attempt.id}] Tempo esgotado ({limit}s)",
                extra={"event_type": "attempt_expired", "attempt_id": attempt.id},
            )
            return self._finalize(updated, quiz, SubmitReason.EXPIRED)
        return updated

    def submit(
        self, attempt: Attempt, quiz: Quiz, reason: SubmitReason = SubmitReason.MANUAL
    ) -> Attempt:
        """Finaliza a tentativa, com qualquer numero de questoes respondidas."""
        self._ensure_open(attempt, "submit")
        return self._finalize(attempt, quiz, SubmitReason(reason))

    def abandon(self, attempt: Attempt) -> Attempt:
        """Marca a tentativa como abandonada (terminal, sem nota)."""
        self._ensure_open(attempt, "abandon")
        logger.info(
            f"[Tentativa {attempt.id}] Abandonada",
            extra={"event_type": "attempt_abandoned", "attempt_id": attempt.id},
        )
        return attempt.model_copy(update={"status": AttemptStatus.ABANDONED})

    # -------------------------------------------------------------------------
    # Internos
    # -------------------------------------------------------------------------

    def _ensure_open(self, attempt: Attempt, event: str) -> None:
        if attempt.is_open:
            return
        logger.warning(
            f"[Tentativa {attempt.id}] Transicao ilegal: '{event}' em '{attempt.status.value}'",
            extra={
                "event_type": "illegal_transition",
                "attempt_id": attempt.id,
                "status": attempt.status.value,
                "event": event,
            },
        )
        raise IllegalTransitionError(attempt.id, attempt.status, event)

    def _finalize(self, attempt: Attempt, quiz: Quiz, reason: SubmitReason) -> Attempt:
        transient = (
            AttemptStatus.EXPIRED if reason == SubmitReason.EXPIRED else AttemptStatus.SUBMITTED
        )
        logger.debug(
            f"[Tentativa {attempt.id}] {AttemptStatus.IN_PROGRESS.value} -> {transient.value}"
        )

        graded = self.grading.grade_answers(quiz, attempt.answers)
        summary = self.grading.calculate_score(quiz, graded)

        finalized = attempt.model_copy(
            update={
                "status": AttemptStatus.GRADED,
                "answers": graded,
                "score": summary.score,
                "passed": summary.passed,
                "points_earned": summary.points_earned,
                "total_points": summary.total_points,
                "finished_at": self.clock(),
                "submit_reason": reason,
            }
        )

        logger.info(
            f"[Tentativa {attempt.id}] {transient.value} -> graded: nota {summary.score} "
            f"({summary.points_earned}/{summary.total_points}), "
            f"{'aprovado' if summary.passed else 'reprovado'}",
            extra={
                "event_type": "attempt_finalized",
                "attempt_id": attempt.id,
                "reason": reason.value,
                "score": summary.score,
                "passed": summary.passed,
            },
        )
        return finalized


def _coerce_value(attempt: Attempt, question_id: str, value: Any) -> AnswerValue:
    """Valida o valor bruto e devolve uma copia propria (sem referencia ao chamador).

    Validacao estrita: ``1`` nao vira ``True`` e numeros sao recusados,
    entao todo valor gravado volta identico do storage.
    """
    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    elif isinstance(value, tuple):
        value = list(value)

    try:
        coerced = _answer_value.validate_python(value, strict=True)
    except ValidationError as exc:
        raise InvalidAnswerValueError(attempt.id, question_id, value) from exc
    return list(coerced) if isinstance(coerced, list) else coerced


def _finalized_for(attempts: Iterable[Attempt], quiz_id: str, user_id: str) -> list[Attempt]:
    return [
        a for a in attempts if a.quiz_id == quiz_id and a.user_id == user_id and a.is_finalized
    ]


def _time_limit(attempt: Attempt, quiz: Quiz) -> int | None:
    if attempt.time_limit_seconds is not None:
        return attempt.time_limit_seconds
    return quiz.time_limit_seconds


class AttemptSession:
    """Sessao de um aluno sobre uma tentativa (estado mutavel protegido).

    Serializa resposta, tick e envio sobre uma unica referencia de estado,
    garantindo que a finalizacao rode no maximo uma vez mesmo quando um
    tick e um envio manual chegam juntos.
    """

    def __init__(
        self,
        quiz: Quiz,
        attempt: Attempt,
        machine: AttemptStateMachine | None = None,
    ):
        self.quiz = quiz
        self.machine = machine or AttemptStateMachine()
        self._attempt = attempt
        self._lock = threading.RLock()
        self._finalize_listeners: list[Callable[[Attempt], Any]] = []

    @property
    def attempt(self) -> Attempt:
        return self._attempt

    @property
    def is_open(self) -> bool:
        return self._attempt.is_open

    def add_finalize_listener(self, callback: Callable[[Attempt], Any]) -> None:
        """Registra callback chamado uma unica vez quando a tentativa sai de IN_PROGRESS."""
        self._finalize_listeners.append(callback)

    def answer(self, question_id: str, value: Any) -> Attempt:
        with self._lock:
            self._attempt = self.machine.record_answer(self._attempt, question_id, value)
            return self._attempt

    def tick(self) -> Attempt:
        with self._lock:
            return self._apply(self.machine.tick(self._attempt, self.quiz))

    def submit(self, reason: SubmitReason = SubmitReason.MANUAL) -> Attempt:
        with self._lock:
            return self._apply(self.machine.submit(self._attempt, self.quiz, reason))

    def abandon(self) -> Attempt:
        with self._lock:
            return self._apply(self.machine.abandon(self._attempt))

    def _apply(self, updated: Attempt) -> Attempt:
        was_open = self._attempt.is_open
        self._attempt = updated
        if was_open and not updated.is_open:
            for callback in self._finalize_listeners:
                callback(updated)
        return updated


_machine = AttemptStateMachine()


def check_start_eligibility(
    quiz: Quiz, user_id: str, prior_attempts: Iterable[Attempt] = ()
) -> RejectionReason | None:
    return _machine.check_start_eligibility(quiz, user_id, prior_attempts)


def start_attempt(
    quiz: Quiz,
    user_id: str,
    prior_attempts: Iterable[Attempt] = (),
    *,
    attempt_id: str | None = None,
    rng: random.Random | None = None,
) -> Attempt:
    return _machine.start(quiz, user_id, prior_attempts, attempt_id=attempt_id, rng=rng)


def record_answer(attempt: Attempt, question_id: str, value: Any) -> Attempt:
    return _machine.record_answer(attempt, question_id, value)


def tick(attempt: Attempt, quiz: Quiz) -> Attempt:
    return _machine.tick(attempt, quiz)


def submit(attempt: Attempt, quiz: Quiz, reason: SubmitReason = SubmitReason.MANUAL) -> Attempt:
    return _machine.submit(attempt, quiz, reason)


def abandon(attempt: Attempt) -> Attempt:
    return _machine.abandon(attempt)
