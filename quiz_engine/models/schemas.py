"""Quiz Schemas - Quiz, tentativas, respostas e estatisticas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import (
    AttemptStatus,
    QuestionDifficulty,
    QuestionType,
    RejectionReason,
    SubmitReason,
    TimerLevel,
)
from .questions import Question

# Valor bruto enviado pelo aluno: id de alternativa, texto, booleano ou
# lista (multipla selecao / lacunas). None = nao respondida.
AnswerValue = Optional[Union[bool, str, list[str]]]


class QuizSettings(BaseModel):
    """Configuracoes do quiz."""

    passing_score: int = Field(default=70, description="Nota minima para aprovacao (0-100)")
    time_limit_minutes: int | None = Field(default=None, description="Limite de tempo")
    allow_multiple_attempts: bool = Field(default=True, description="Permitir refazer")
    max_attempts: int | None = Field(default=None, description="None = ilimitado")
    show_correct_answers: bool = Field(default=True, description="Mostrar gabarito")
    show_explanations: bool = Field(default=True, description="Mostrar explicacoes")
    randomize_questions: bool = Field(default=False, description="Embaralhar questoes")
    randomize_options: bool = Field(default=False, description="Embaralhar alternativas")
    allow_review: bool = Field(default=True, description="Permitir revisao apos envio")


class Quiz(BaseModel):
    """Quiz completo (rascunho ou publicado)."""

    id: str = Field(..., description="ID do quiz")
    title: str = Field(default="", description="Titulo")
    description: str = Field(default="", description="Descricao")
    instructions: str = Field(default="", description="Instrucoes exibidas antes do inicio")
    questions: list[Question] = Field(default_factory=list, description="Questoes em ordem")
    settings: QuizSettings = Field(default_factory=QuizSettings)
    is_published: bool = Field(default=False, description="Visivel para alunos")

    @property
    def total_points(self) -> int:
        return sum(q.points for q in self.questions)

    @property
    def time_limit_seconds(self) -> int | None:
        if self.settings.time_limit_minutes is None:
            return None
        return self.settings.time_limit_minutes * 60

    def get_question(self, question_id: str) -> Question | None:
        """Busca questao pelo ID."""
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class Answer(BaseModel):
    """Resposta de uma questao dentro da tentativa.

    ``is_correct`` e ``points_earned`` so existem depois da correcao.
    ``is_correct=None`` em uma resposta corrigida significa indeterminado
    (dissertativa aguardando correcao manual).
    """

    model_config = ConfigDict(frozen=True)

    question_id: str
    question_type: QuestionType
    value: AnswerValue = None
    answered_at: datetime | None = None
    is_correct: bool | None = None
    points_earned: int | None = None
    points_possible: int | None = None

    @property
    def is_answered(self) -> bool:
        return not is_blank(self.value)

    @property
    def is_graded(self) -> bool:
        return self.points_earned is not None


class Attempt(BaseModel):
    """Tentativa de um aluno em um quiz.

    Imutavel: toda transicao da maquina de estados devolve uma nova
    instancia. Aberta (sem nota, sem ``finished_at``) ou finalizada
    (nota e ``finished_at`` presentes), nunca um meio-termo.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    quiz_id: str
    user_id: str
    attempt_number: int = 1
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    started_at: datetime
    answers: tuple[Answer, ...] = ()
    elapsed_seconds: int = 0
    time_limit_seconds: int | None = None
    question_order: tuple[str, ...] = ()
    option_order: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    # Preenchidos na finalizacao
    score: int | None = None
    passed: bool | None = None
    points_earned: int | None = None
    total_points: int = 0
    finished_at: datetime | None = None
    submit_reason: SubmitReason | None = None

    @model_validator(mode="after")
    def _check_finalization(self) -> Attempt:
        finalized = self.status == AttemptStatus.GRADED
        if self.finished_at is not None and self.score is None:
            raise ValueError("Tentativa com finished_at precisa de nota")
        if finalized and (self.score is None or self.finished_at is None):
            raise ValueError("Tentativa corrigida precisa de nota e finished_at")
        if not finalized and self.score is not None:
            raise ValueError("Tentativa aberta nao pode ter nota")
        return self

    @property
    def is_open(self) -> bool:
        return self.status == AttemptStatus.IN_PROGRESS

    @property
    def is_finalized(self) -> bool:
        return self.status == AttemptStatus.GRADED

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self.answers if answer.is_answered)

    @property
    def unanswered_count(self) -> int:
        return len(self.answers) - self.answered_count

    def answer_for(self, question_id: str) -> Answer | None:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None


class GradeResult(BaseModel):
    """Saida do motor de correcao para uma questao."""

    model_config = ConfigDict(frozen=True)

    is_correct: bool | None
    points_earned: int


class ScoreSummary(BaseModel):
    """Pontuacao consolidada de uma tentativa."""

    points_earned: int
    total_points: int
    score: int
    passed: bool


class QuizValidation(BaseModel):
    """Resultado detalhado da validacao de um rascunho."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class TimerSnapshot(BaseModel):
    """Estado observavel do cronometro de uma tentativa."""

    limited: bool = Field(..., description="Se o quiz tem limite de tempo")
    remaining_seconds: int | None = Field(None, description="None quando sem limite")
    elapsed_seconds: int
    level: TimerLevel
    expired: bool = False


class OptionStatistics(BaseModel):
    option_id: str
    option_text: str
    selected_count: int
    percentage: float


class QuestionStatistics(BaseModel):
    """Metricas de uma questao entre todas as tentativas finalizadas."""

    question_id: str
    question_text: str
    total_responses: int
    correct_responses: int
    incorrect_responses: int
    accuracy: float
    option_stats: list[OptionStatistics] = Field(default_factory=list)


class QuizStatistics(BaseModel):
    """Estatisticas derivadas (nunca persistidas) de um quiz."""

    quiz_id: str
    total_attempts: int = 0
    unique_users: int = 0
    average_score: float = 0.0
    pass_rate: float = 0.0
    best_scores: dict[str, int] = Field(default_factory=dict)
    highest_score: int = 0
    lowest_score: int = 0
    average_time_spent: float = Field(0.0, description="Media em minutos")
    estimated_difficulty: QuestionDifficulty = QuestionDifficulty.MEDIUM
    question_stats: list[QuestionStatistics] = Field(default_factory=list)
    last_updated: datetime


class QuestionResult(BaseModel):
    """Resultado de uma questao exibido ao aluno."""

    question_id: str
    question_text: str
    answer: Answer
    is_correct: bool | None
    show_correct_answer: bool
    show_explanation: bool
    correct_answer: Any = None
    explanation: str | None = None


class QuizResults(BaseModel):
    """Resumo de uma tentativa finalizada."""

    attempt: Attempt
    correct_count: int
    incorrect_count: int
    unanswered_count: int
    pending_review_count: int
    accuracy: float
    question_results: list[QuestionResult] = Field(default_factory=list)
    attempts_count: int = 1
    best_score: int | None = None
    average_score: float | None = None


class AttemptRejection(BaseModel):
    """Corpo de resposta quando o inicio de tentativa e recusado."""

    reason: RejectionReason
    message: str


class StartAttemptRequest(BaseModel):
    """Request para iniciar tentativa (usuario ja autenticado pelo chamador)."""

    user_id: str = Field(..., min_length=1, description="ID opaco do usuario")


class RecordAnswerRequest(BaseModel):
    """Request para gravar/sobrescrever a resposta de uma questao."""

    model_config = ConfigDict(strict=True)

    value: AnswerValue = Field(
        None, description="Valor bruto (None limpa a resposta)"
    )


class SubmitAttemptRequest(BaseModel):
    """Request de envio manual ou por expiracao."""

    reason: SubmitReason = Field(default=SubmitReason.MANUAL, description="manual | expired")


def is_blank(value: Any) -> bool:
    """Considera nao respondida: None, string vazia/so espacos, lista vazia
    ou lista so com lacunas vazias."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return all(is_blank(item) for item in value)
    return False
