"""Quiz Engines - Logica de negocios."""

from .attempt_machine import (
    AttemptSession,
    AttemptStateMachine,
    abandon,
    check_start_eligibility,
    record_answer,
    start_attempt,
    submit,
    tick,
)
from .grading_engine import QuizGradingEngine, grade
from .results import QuizResultsBuilder, build_results
from .statistics import QuizStatisticsAggregator, best_attempt, compute_statistics
from .timer import (
    AsyncioTickSource,
    ExpiryNotice,
    ManualTickSource,
    TimerController,
    classify_remaining,
    remaining_seconds,
    timer_snapshot,
)
from .validator import QuizValidator, check_quiz, validate_answer_input, validate_quiz

__all__ = [
    "AttemptSession",
    "AttemptStateMachine",
    "QuizGradingEngine",
    "QuizResultsBuilder",
    "QuizStatisticsAggregator",
    "QuizValidator",
    "TimerController",
    "AsyncioTickSource",
    "ManualTickSource",
    "ExpiryNotice",
    "abandon",
    "best_attempt",
    "build_results",
    "check_quiz",
    "check_start_eligibility",
    "classify_remaining",
    "compute_statistics",
    "grade",
    "record_answer",
    "remaining_seconds",
    "start_attempt",
    "submit",
    "tick",
    "timer_snapshot",
    "validate_answer_input",
    "validate_quiz",
]
