"""Quiz Models - Enums, variantes de questao e schemas."""

from .enums import (
    AttemptStatus,
    QuestionDifficulty,
    QuestionType,
    RejectionReason,
    SubmitReason,
    TimerLevel,
)
from .questions import (
    EssayQuestion,
    FillBlankQuestion,
    MultipleChoiceQuestion,
    MultipleSelectQuestion,
    Question,
    QuestionOption,
    ShortAnswerQuestion,
    TrueFalseQuestion,
    parse_question,
)
from .schemas import (
    Answer,
    AnswerValue,
    Attempt,
    AttemptRejection,
    RecordAnswerRequest,
    StartAttemptRequest,
    SubmitAttemptRequest,
    GradeResult,
    OptionStatistics,
    QuestionResult,
    QuestionStatistics,
    Quiz,
    QuizResults,
    QuizSettings,
    QuizStatistics,
    QuizValidation,
    ScoreSummary,
    TimerSnapshot,
    is_blank,
)

__all__ = [
    # Enums
    "AttemptStatus",
    "QuestionDifficulty",
    "QuestionType",
    "RejectionReason",
    "SubmitReason",
    "TimerLevel",
    # Questoes
    "Question",
    "QuestionOption",
    "MultipleChoiceQuestion",
    "MultipleSelectQuestion",
    "TrueFalseQuestion",
    "ShortAnswerQuestion",
    "FillBlankQuestion",
    "EssayQuestion",
    "parse_question",
    # Schemas
    "Answer",
    "AnswerValue",
    "Attempt",
    "AttemptRejection",
    "RecordAnswerRequest",
    "StartAttemptRequest",
    "SubmitAttemptRequest",
    "GradeResult",
    "OptionStatistics",
    "QuestionResult",
    "QuestionStatistics",
    "Quiz",
    "QuizResults",
    "QuizSettings",
    "QuizStatistics",
    "QuizValidation",
    "ScoreSummary",
    "TimerSnapshot",
    "is_blank",
]
