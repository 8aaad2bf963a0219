"""Quiz Enums - Tipos de questao, estados de tentativa e niveis do timer."""

from enum import Enum


class QuestionType(str, Enum):
    """Tipos de questao suportados (discriminante do modelo)."""

    MULTIPLE_CHOICE = "multiple_choice"
    MULTIPLE_SELECT = "multiple_select"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    ESSAY = "essay"
    FILL_BLANK = "fill_blank"


class QuestionDifficulty(str, Enum):
    """Niveis de dificuldade das questoes."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class AttemptStatus(str, Enum):
    """Estados da maquina de tentativas.

    SUBMITTED e EXPIRED sao transitorios: ambos resolvem para GRADED na
    mesma chamada e ficam registrados apenas em ``Attempt.submit_reason``.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    EXPIRED = "expired"
    GRADED = "graded"
    ABANDONED = "abandoned"


class SubmitReason(str, Enum):
    """Evento que disparou a finalizacao."""

    MANUAL = "manual"
    EXPIRED = "expired"


class RejectionReason(str, Enum):
    """Motivos para recusar o inicio de uma tentativa."""

    QUIZ_NOT_PUBLISHED = "quiz_not_published"
    NO_QUESTIONS = "no_questions"
    MULTIPLE_ATTEMPTS_DISABLED = "multiple_attempts_disabled"
    MAX_ATTEMPTS_REACHED = "max_attempts_reached"


class TimerLevel(str, Enum):
    """Classificacao do tempo restante."""

    NORMAL = "normal"  # > 5 minutos
    WARNING = "warning"  # <= 5 minutos
    CRITICAL = "critical"  # <= 1 minuto
