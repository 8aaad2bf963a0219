"""Quiz Engine - Estrutura, correcao e tentativas cronometradas de quizzes.

Arquitetura:
- models/: Enums, variantes de questao, schemas Pydantic
- engine/: Validator, GradingEngine, AttemptStateMachine, Timer, Statistics
- storage/: QuizStore sobre KV assincrono
- router.py: endpoints FastAPI
"""

from .engine import (
    AttemptSession,
    AttemptStateMachine,
    QuizGradingEngine,
    QuizStatisticsAggregator,
    QuizValidator,
    TimerController,
    abandon,
    build_results,
    compute_statistics,
    grade,
    record_answer,
    start_attempt,
    submit,
    tick,
    validate_quiz,
)
from .errors import (
    AttemptRejected,
    IllegalTransitionError,
    QuizEngineError,
    InvalidAnswerValueError,
    UnknownQuestionError,
)
from .models import Answer, Attempt, Question, Quiz, QuizSettings, QuizStatistics
from .storage import MemoryKV, QuizStore

__all__ = [
    # Models
    "Answer",
    "Attempt",
    "Question",
    "Quiz",
    "QuizSettings",
    "QuizStatistics",
    # Engines
    "AttemptSession",
    "AttemptStateMachine",
    "QuizGradingEngine",
    "QuizStatisticsAggregator",
    "QuizValidator",
    "TimerController",
    # Operacoes
    "validate_quiz",
    "start_attempt",
    "record_answer",
    "tick",
    "submit",
    "abandon",
    "compute_statistics",
    "build_results",
    "grade",
    # Erros
    "QuizEngineError",
    "AttemptRejected",
    "IllegalTransitionError",
    "InvalidAnswerValueError",
    "UnknownQuestionError",
    # Storage
    "MemoryKV",
    "QuizStore",
]
