"""Timer Controller - Contagem regressiva e expiracao de tentativas.

O relogio real fica fora da maquina de estados: uma ``TickSource``
cancelavel entrega um tick por intervalo e o ``TimerController`` repassa
para a ``AttemptSession``. Nos testes, ``ManualTickSource`` dispara ticks
sinteticos sem esperar tempo de parede.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from ..config import load_settings
from ..errors import IllegalTransitionError
from ..models.enums import SubmitReason, TimerLevel
from ..models.schemas import Attempt, Quiz, TimerSnapshot
from .attempt_machine import AttemptSession

logger = logging.getLogger(__name__)

DEFAULT_WARNING_SECONDS = 300
DEFAULT_CRITICAL_SECONDS = 60
DEFAULT_EXPIRY_NOTICE_SECONDS = 2.0

TickCallback = Callable[[], Any]


def remaining_seconds(time_limit_minutes: int | None, elapsed_seconds: int) -> int | None:
    """Segundos restantes (nunca negativo); None quando nao ha limite."""
    if time_limit_minutes is None:
        return None
    return max(time_limit_minutes * 60 - elapsed_seconds, 0)


def classify_remaining(
    remaining: int | None,
    warning_seconds: int = DEFAULT_WARNING_SECONDS,
    critical_seconds: int = DEFAULT_CRITICAL_SECONDS,
) -> TimerLevel:
    """normal (> 5 min), warning (<= 5 min), critical (<= 1 min)."""
    if remaining is None:
        return TimerLevel.NORMAL
    if remaining <= critical_seconds:
        return TimerLevel.CRITICAL
    if remaining <= warning_seconds:
        return TimerLevel.WARNING
    return TimerLevel.NORMAL


def timer_snapshot(
    attempt: Attempt,
    quiz: Quiz | None = None,
    warning_seconds: int = DEFAULT_WARNING_SECONDS,
    critical_seconds: int = DEFAULT_CRITICAL_SECONDS,
) -> TimerSnapshot:
    """Estado do cronometro para a camada de apresentacao."""
    limit = attempt.time_limit_seconds
    if limit is None and quiz is not None:
        limit = quiz.time_limit_seconds

    if limit is None:
        return TimerSnapshot(
            limited=False,
            remaining_seconds=None,
            elapsed_seconds=attempt.elapsed_seconds,
            level=TimerLevel.NORMAL,
        )

    remaining = max(limit - attempt.elapsed_seconds, 0)
    return TimerSnapshot(
        limited=True,
        remaining_seconds=remaining,
        elapsed_seconds=attempt.elapsed_seconds,
        level=classify_remaining(remaining, warning_seconds, critical_seconds),
        expired=remaining == 0,
    )


class TickSource(Protocol):
    """Fonte de ticks cancelavel injetada no controller."""

    def start(self, callback: TickCallback) -> None: ...

    def cancel(self) -> None: ...

    @property
    def is_running(self) -> bool: ...


class AsyncioTickSource:
    """Tick periodico via ``asyncio.Task`` (um por intervalo)."""

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self._task: asyncio.Task | None = None
        self._cancelled = False

    def start(self, callback: TickCallback) -> None:
        if self.is_running:
            raise RuntimeError("TickSource ja esta em execucao")
        self._cancelled = False
        self._task = asyncio.get_running_loop().create_task(self._run(callback))

    async def _run(self, callback: TickCallback) -> None:
        try:
            while not self._cancelled:
                await asyncio.sleep(self.interval)
                if self._cancelled:
                    break
                result = callback()
                if inspect.isawaitable(result):
                    await result
        except asyncio.CancelledError:
            self._cancelled = True
            raise
        except Exception as exc:
            self._cancelled = True
            logger.error(
                f"Timer lifecycle: ERROR - Operacao tick, Tipo countdown_execution_error: {exc}",
                extra={
                    "event_type": "timer_error",
                    "error_type": "countdown_execution_error",
                    "error_message": str(exc),
                    "operation": "tick",
                },
            )
            raise

    def cancel(self) -> None:
        self._cancelled = True
        # Chamado de dentro do proprio tick: o loop sai sozinho
        if self._task and not self._task.done() and not self._is_current_task():
            self._task.cancel()

    def _is_current_task(self) -> bool:
        try:
            return asyncio.current_task() is self._task
        except RuntimeError:
            return False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._cancelled


class ManualTickSource:
    """Fonte de ticks controlada pelo chamador (testes, replays)."""

    def __init__(self):
        self._callback: TickCallback | None = None
        self._running = False

    def start(self, callback: TickCallback) -> None:
        self._callback = callback
        self._running = True

    def fire(self, count: int = 1) -> int:
        """Dispara ate ``count`` ticks; para cedo se a fonte for cancelada."""
        fired = 0
        for _ in range(count):
            if not self._running or self._callback is None:
                break
            self._callback()
            fired += 1
        return fired

    def cancel(self) -> None:
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running


@dataclass(frozen=True)
class ExpiryNotice:
    """Instrucao ao chamador: exibir aviso curto antes do resultado.

    O atraso e apenas cosmetico; a nota ja esta fixada em ``attempt``.
    """

    attempt: Attempt
    notice_seconds: float
    message: str = "Tempo esgotado! Suas respostas foram enviadas automaticamente."

    async def wait(self) -> Attempt:
        await asyncio.sleep(self.notice_seconds)
        return self.attempt


ExpiredCallback = Callable[[ExpiryNotice], Any]


class TimerController:
    """Liga uma ``TickSource`` a uma ``AttemptSession``.

    - Cada tick incrementa ``elapsed_seconds`` da sessao
    - Ao expirar: para os ticks e chama ``on_expired`` com um ExpiryNotice
    - Envio manual ou abandono tambem param os ticks
    - ``cancel()`` para os ticks sem finalizar (aluno saiu da pagina)
    """

    def __init__(
        self,
        session: AttemptSession,
        tick_source: TickSource | None = None,
        on_expired: ExpiredCallback | None = None,
        warning_seconds: int | None = None,
        critical_seconds: int | None = None,
        expiry_notice_seconds: float | None = None,
    ):
        settings = load_settings()
        self.session = session
        self.tick_source = tick_source or AsyncioTickSource(settings.tick_interval)
        self.on_expired = on_expired
        self.warning_seconds = (
            warning_seconds if warning_seconds is not None else settings.warning_seconds
        )
        self.critical_seconds = (
            critical_seconds if critical_seconds is not None else settings.critical_seconds
        )
        self.expiry_notice_seconds = (
            expiry_notice_seconds
            if expiry_notice_seconds is not None
            else settings.expiry_notice_seconds
        )
        self._started_at: float | None = None
        self.session.add_finalize_listener(self._on_finalized)

    @property
    def attempt_id(self) -> str:
        return self.session.attempt.id

    def start(self) -> None:
        """Inicia a contagem (no-op para quizzes sem limite de tempo)."""
        if not self.session.is_open:
            raise IllegalTransitionError(
                self.attempt_id, self.session.attempt.status, "timer_start"
            )
        if self.snapshot().limited is False:
            logger.debug(f"[Tentativa {self.attempt_id}] Quiz sem limite de tempo, timer inativo")
            return

        self._started_at = time.time()
        logger.info(
            f"Timer lifecycle: COUNTDOWN_START - Tentativa {self.attempt_id}",
            extra={"event_type": "timer_countdown_start", "attempt_id": self.attempt_id},
        )
        self.tick_source.start(self._handle_tick)

    def cancel(self) -> None:
        """Para os ticks sem finalizar a tentativa."""
        if self.tick_source.is_running:
            self.tick_source.cancel()
            logger.info(
                f"Timer lifecycle: CANCELLED - Tentativa {self.attempt_id}",
                extra={"event_type": "timer_cancelled", "attempt_id": self.attempt_id},
            )

    def snapshot(self) -> TimerSnapshot:
        return timer_snapshot(
            self.session.attempt,
            self.session.quiz,
            self.warning_seconds,
            self.critical_seconds,
        )

    def _handle_tick(self) -> Any:
        try:
            attempt = self.session.tick()
        except IllegalTransitionError:
            # Tick em voo quando a tentativa ja saiu de IN_PROGRESS
            logger.warning(
                f"Timer lifecycle: RACE_CONDITION - tick descartado para tentativa {self.attempt_id}",
                extra={"event_type": "timer_race_condition", "attempt_id": self.attempt_id},
            )
            self.tick_source.cancel()
            return None

        snapshot = self.snapshot()
        if snapshot.remaining_seconds is not None and (
            snapshot.remaining_seconds % 60 == 0 or snapshot.remaining_seconds <= 5
        ):
            logger.debug(
                f"Timer lifecycle: UPDATE - Tentativa {self.attempt_id}, "
                f"restam {snapshot.remaining_seconds}s ({snapshot.level.value})"
            )

        if attempt.submit_reason == SubmitReason.EXPIRED:
            notice = ExpiryNotice(attempt=attempt, notice_seconds=self.expiry_notice_seconds)
            if self.on_expired is not None:
                return self.on_expired(notice)
        return None

    def _on_finalized(self, attempt: Attempt) -> None:
        self.tick_source.cancel()
        duration = time.time() - self._started_at if self._started_at else 0.0
        logger.info(
            f"Timer lifecycle: COMPLETED - Tentativa {attempt.id}, status {attempt.status.value}, "
            f"motivo {attempt.submit_reason.value if attempt.submit_reason else 'abandoned'}, "
            f"{duration:.1f}s de relogio",
            extra={
                "event_type": "timer_completed",
                "attempt_id": attempt.id,
                "completion_type": attempt.submit_reason.value if attempt.submit_reason else "abandoned",
            },
        )
