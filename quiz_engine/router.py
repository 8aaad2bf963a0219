"""Quiz Engine Router - Endpoints FastAPI sobre o engine puro.

O router e o colaborador de storage: carrega entidades do ``QuizStore``,
chama o engine e persiste o que ele devolve. Autenticacao fica fora
(``user_id`` chega ja resolvido).
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from .engine.attempt_machine import AttemptStateMachine
from .engine.results import QuizResultsBuilder
from .engine.statistics import QuizStatisticsAggregator
from .engine.timer import timer_snapshot
from .engine.validator import QuizValidator, validate_answer_input
from .errors import (
    AttemptNotFoundError,
    AttemptRejected,
    IllegalTransitionError,
    InvalidAnswerValueError,
    QuizNotFoundError,
    UnknownQuestionError,
)
from .models.schemas import (
    Attempt,
    AttemptRejection,
    Quiz,
    QuizResults,
    QuizStatistics,
    QuizValidation,
    RecordAnswerRequest,
    StartAttemptRequest,
    SubmitAttemptRequest,
    TimerSnapshot,
)
from .storage import MemoryKV, QuizStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz-engine", tags=["Quiz Engine"])

# =============================================================================
# ESTADO DO MODULO
# =============================================================================

# Store padrao em memoria (substituido via dependency_overrides em producao)
_default_store = QuizStore(MemoryKV())

# Uma trava por tentativa: tick e envio concorrentes nunca finalizam duas vezes
_attempt_locks: dict[str, asyncio.Lock] = {}


def _lock_for(attempt_id: str) -> asyncio.Lock:
    lock = _attempt_locks.get(attempt_id)
    if lock is None:
        lock = _attempt_locks[attempt_id] = asyncio.Lock()
    return lock


def _release_lock(attempt: Attempt) -> None:
    """Descarta a trava de tentativas que sairam de IN_PROGRESS."""
    if not attempt.is_open:
        _attempt_locks.pop(attempt.id, None)


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


async def get_quiz_store() -> QuizStore:
    """Dependency para obter o QuizStore."""
    return _default_store


async def get_state_machine() -> AttemptStateMachine:
    return AttemptStateMachine()


async def _load_quiz(store: QuizStore, quiz_id: str) -> Quiz:
    try:
        return await store.get_quiz(quiz_id)
    except QuizNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


async def _load_attempt(store: QuizStore, attempt_id: str) -> Attempt:
    try:
        return await store.get_attempt(attempt_id)
    except AttemptNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _conflict(exc: IllegalTransitionError) -> HTTPException:
    _attempt_locks.pop(exc.attempt_id, None)
    return HTTPException(
        status_code=409,
        detail={"error": "illegal_transition", "status": exc.status.value, "event": exc.event},
    )


# =============================================================================
# AUTORIA
# =============================================================================


@router.post("/quizzes/validate", response_model=QuizValidation)
async def validate_quiz_draft(draft: Quiz):
    """Valida um rascunho sem persistir (erros bloqueiam publicacao)."""
    return QuizValidator().check(draft)


@router.put("/quizzes/{quiz_id}", response_model=Quiz)
async def save_quiz(quiz_id: str, draft: Quiz, store: QuizStore = Depends(get_quiz_store)):
    """Valida e salva o quiz; rascunhos invalidos nao sao gravados."""
    if draft.id != quiz_id:
        raise HTTPException(status_code=400, detail="ID do corpo difere do ID da URL")

    errors = QuizValidator().validate(draft)
    if errors:
        raise HTTPException(status_code=422, detail={"errors": errors})

    await store.save_quiz(draft)
    logger.info(f"[Quiz {quiz_id}] Salvo (publicado={draft.is_published})")
    return draft


@router.get("/quizzes/{quiz_id}", response_model=Quiz)
async def get_quiz(quiz_id: str, store: QuizStore = Depends(get_quiz_store)):
    return await _load_quiz(store, quiz_id)


# =============================================================================
# TENTATIVAS
# =============================================================================


@router.post(
    "/quizzes/{quiz_id}/attempts",
    response_model=Attempt,
    responses={409: {"model": AttemptRejection}},
)
async def start_attempt(
    quiz_id: str,
    request: StartAttemptRequest,
    store: QuizStore = Depends(get_quiz_store),
    machine: AttemptStateMachine = Depends(get_state_machine),
):
    """Inicia uma tentativa respeitando o limite de tentativas do quiz."""
    quiz = await _load_quiz(store, quiz_id)
    prior = await store.list_attempts(quiz_id, user_id=request.user_id)

    try:
        attempt = machine.start(quiz, request.user_id, prior)
    except AttemptRejected as exc:
        raise HTTPException(
            status_code=409,
            detail=AttemptRejection(reason=exc.reason, message=exc.message).model_dump(mode="json"),
        ) from exc

    await store.save_attempt(attempt)
    return attempt


@router.put("/attempts/{attempt_id}/answers/{question_id}", response_model=Attempt)
async def record_answer(
    attempt_id: str,
    question_id: str,
    request: RecordAnswerRequest,
    store: QuizStore = Depends(get_quiz_store),
    machine: AttemptStateMachine = Depends(get_state_machine),
):
    """Grava (ou sobrescreve) a resposta de uma questao."""
    async with _lock_for(attempt_id):
        attempt = await _load_attempt(store, attempt_id)
        quiz = await _load_quiz(store, attempt.quiz_id)

        question = quiz.get_question(question_id)
        if question is not None:
            input_errors = validate_answer_input(question, request.value)
            if input_errors:
                raise HTTPException(status_code=422, detail={"errors": input_errors})

        try:
            attempt = machine.record_answer(attempt, question_id, request.value)
        except IllegalTransitionError as exc:
            raise _conflict(exc) from exc
        except UnknownQuestionError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except InvalidAnswerValueError as exc:
            raise HTTPException(status_code=422, detail={"errors": [str(exc)]}) from exc

        await store.save_attempt(attempt)
        return attempt


@router.post("/attempts/{attempt_id}/tick", response_model=Attempt)
async def tick_attempt(
    attempt_id: str,
    store: QuizStore = Depends(get_quiz_store),
    machine: AttemptStateMachine = Depends(get_state_machine),
):
    """Um tick de um segundo; finaliza automaticamente ao esgotar o tempo."""
    async with _lock_for(attempt_id):
        attempt = await _load_attempt(store, attempt_id)
        quiz = await _load_quiz(store, attempt.quiz_id)
        try:
            attempt = machine.tick(attempt, quiz)
        except IllegalTransitionError as exc:
            raise _conflict(exc) from exc

        await store.save_attempt(attempt)
        _release_lock(attempt)
        return attempt


@router.post("/attempts/{attempt_id}/submit", response_model=Attempt)
async def submit_attempt(
    attempt_id: str,
    request: SubmitAttemptRequest | None = None,
    store: QuizStore = Depends(get_quiz_store),
    machine: AttemptStateMachine = Depends(get_state_machine),
):
    """Envia a tentativa (a confirmacao de questoes em branco e da UI)."""
    reason = request.reason if request else SubmitAttemptRequest().reason
    async with _lock_for(attempt_id):
        attempt = await _load_attempt(store, attempt_id)
        quiz = await _load_quiz(store, attempt.quiz_id)
        try:
            attempt = machine.submit(attempt, quiz, reason)
        except IllegalTransitionError as exc:
            raise _conflict(exc) from exc

        await store.save_attempt(attempt)
        _release_lock(attempt)
        return attempt


@router.post("/attempts/{attempt_id}/abandon", response_model=Attempt)
async def abandon_attempt(
    attempt_id: str,
    store: QuizStore = Depends(get_quiz_store),
    machine: AttemptStateMachine = Depends(get_state_machine),
):
    async with _lock_for(attempt_id):
        attempt = await _load_attempt(store, attempt_id)
        try:
            attempt = machine.abandon(attempt)
        except IllegalTransitionError as exc:
            raise _conflict(exc) from exc

        await store.save_attempt(attempt)
        _release_lock(attempt)
        return attempt


@router.get("/attempts/{attempt_id}/timer", response_model=TimerSnapshot)
async def get_timer(attempt_id: str, store: QuizStore = Depends(get_quiz_store)):
    attempt = await _load_attempt(store, attempt_id)
    return timer_snapshot(attempt)


@router.get("/attempts/{attempt_id}/results", response_model=QuizResults)
async def get_results(attempt_id: str, store: QuizStore = Depends(get_quiz_store)):
    """Resultado de uma tentativa finalizada, com historico do aluno."""
    attempt = await _load_attempt(store, attempt_id)
    quiz = await _load_quiz(store, attempt.quiz_id)
    history = await store.list_attempts(quiz.id)
    try:
        return QuizResultsBuilder().build(quiz, attempt, history)
    except IllegalTransitionError as exc:
        raise _conflict(exc) from exc


# =============================================================================
# ESTATISTICAS
# =============================================================================


@router.get("/quizzes/{quiz_id}/statistics", response_model=QuizStatistics)
async def get_statistics(quiz_id: str, store: QuizStore = Depends(get_quiz_store)):
    """Estatisticas recalculadas do zero sobre o snapshot atual."""
    quiz = await _load_quiz(store, quiz_id)
    attempts = await store.list_attempts(quiz_id)
    return QuizStatisticsAggregator().compute(quiz_id, attempts, quiz)
