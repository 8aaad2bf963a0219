"""Question Models - Variantes de questao (tagged union por ``type``).

Cada tipo de questao e um modelo Pydantic proprio com seus campos
especificos; o union ``Question`` usa ``type`` como discriminante, entao
um dict vindo do storage e validado direto para a variante correta.

Os modelos aceitam rascunhos incompletos (pontos zerados, textos vazios):
quem decide se um rascunho pode ser publicado e o ``QuizValidator``.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from .enums import QuestionDifficulty


class QuestionOption(BaseModel):
    """Alternativa de questao de escolha."""

    id: str = Field(..., description="ID da alternativa")
    text: str = Field(default="", description="Texto da alternativa")
    is_correct: bool = Field(default=False, description="Se a alternativa e correta")
    explanation: str | None = Field(
        default=None, description="Explicacao especifica desta alternativa"
    )


class QuestionBase(BaseModel):
    """Campos comuns a todas as variantes."""

    id: str = Field(..., description="ID unico da questao")
    question: str = Field(default="", description="Enunciado (markdown)")
    points: int = Field(default=1, description="Pontos da questao (> 0 para publicar)")
    difficulty: QuestionDifficulty | None = Field(default=None, description="Dificuldade")
    hint: str | None = Field(default=None, description="Dica revelavel pelo aluno")
    explanation: str | None = Field(
        default=None, description="Explicacao exibida apos a correcao"
    )
    tags: list[str] = Field(default_factory=list, description="Tags de categorizacao")
    image: str | None = Field(default=None, description="URL de imagem opcional")


class _ChoiceQuestion(QuestionBase):
    options: list[QuestionOption] = Field(default_factory=list, description="Alternativas")

    @property
    def correct_option_ids(self) -> list[str]:
        """IDs das alternativas marcadas como corretas, na ordem de exibicao."""
        return [option.id for option in self.options if option.is_correct]

    @property
    def option_ids(self) -> list[str]:
        return [option.id for option in self.options]


class MultipleChoiceQuestion(_ChoiceQuestion):
    """Uma unica alternativa correta."""

    type: Literal["multiple_choice"] = "multiple_choice"

    @property
    def correct_option_id(self) -> str | None:
        correct = self.correct_option_ids
        return correct[0] if correct else None


class MultipleSelectQuestion(_ChoiceQuestion):
    """Conjunto de alternativas corretas (tudo ou nada)."""

    type: Literal["multiple_select"] = "multiple_select"


class TrueFalseQuestion(QuestionBase):
    """Verdadeiro ou falso."""

    type: Literal["true_false"] = "true_false"
    correct_answer: bool = Field(default=True, description="Resposta correta")

    @property
    def options(self) -> list[QuestionOption]:
        """Par fixo de alternativas, para uniformidade com as questoes de escolha."""
        return [
            QuestionOption(id="true", text="Verdadeiro", is_correct=self.correct_answer),
            QuestionOption(id="false", text="Falso", is_correct=not self.correct_answer),
        ]


class ShortAnswerQuestion(QuestionBase):
    """Resposta curta comparada por texto."""

    type: Literal["short_answer"] = "short_answer"
    correct_answer: str = Field(default="", description="Resposta esperada")
    case_sensitive: bool = Field(default=False, description="Diferenciar maiusculas")
    acceptable_answers: list[str] = Field(
        default_factory=list, description="Sinonimos aceitos"
    )


class FillBlankQuestion(QuestionBase):
    """Lacunas preenchidas em ordem, uma string por lacuna."""

    type: Literal["fill_blank"] = "fill_blank"
    correct_answer: list[str] = Field(
        default_factory=list, description="Resposta de cada lacuna, em ordem"
    )
    case_sensitive: bool = Field(default=False, description="Diferenciar maiusculas")
    acceptable_answers: list[list[str]] = Field(
        default_factory=list,
        description="Sinonimos por lacuna (alinhado por indice, pode ser mais curto)",
    )

    @property
    def blank_count(self) -> int:
        return len(self.correct_answer)

    def synonyms_for(self, index: int) -> list[str]:
        """Sinonimos aceitos para a lacuna ``index`` (vazio se nao houver)."""
        if index < len(self.acceptable_answers):
            return self.acceptable_answers[index]
        return []


class EssayQuestion(QuestionBase):
    """Dissertativa: nunca corrigida automaticamente."""

    type: Literal["essay"] = "essay"
    sample_answer: str = Field(default="", description="Resposta modelo")
    min_length: int | None = Field(default=None, description="Minimo de caracteres")
    max_length: int | None = Field(default=None, description="Maximo de caracteres")


Question = Annotated[
    Union[
        MultipleChoiceQuestion,
        MultipleSelectQuestion,
        TrueFalseQuestion,
        ShortAnswerQuestion,
        FillBlankQuestion,
        EssayQuestion,
    ],
    Field(discriminator="type"),
]

_question_adapter: TypeAdapter[Question] = TypeAdapter(Question)


def parse_question(data: dict) -> Question:
    """Valida um dict para a variante indicada por ``data["type"]``."""
    return _question_adapter.validate_python(data)
