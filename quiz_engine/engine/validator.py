"""Quiz Validator - Checagens de autoria antes da publicacao."""

import logging
from collections import Counter
from typing import Any

from ..models.enums import QuestionType
from ..models.questions import (
    EssayQuestion,
    FillBlankQuestion,
    MultipleChoiceQuestion,
    MultipleSelectQuestion,
    Question,
    ShortAnswerQuestion,
)
from ..models.schemas import Quiz, QuizValidation

logger = logging.getLogger(__name__)


class QuizValidator:
    """Validador de rascunhos de quiz.

    Todas as regras rodam de forma independente e todas as violacoes sao
    coletadas (sem short-circuit). Um rascunho e publicavel se, e somente
    se, a lista de erros estiver vazia. Avisos nunca bloqueiam.

    Example:
        >>> validator = QuizValidator()
        >>> validator.validate(Quiz(id="q1", title=""))
        ['Titulo obrigatorio', 'Quiz precisa de pelo menos uma questao']
    """

    MIN_OPTIONS = 2

    def validate(self, draft: Quiz) -> list[str]:
        """Retorna a lista ordenada de erros (vazia = valido)."""
        return self.check(draft).errors

    def check(self, draft: Quiz) -> QuizValidation:
        """Executa todas as regras e separa erros de avisos."""
        errors: list[str] = []
        warnings: list[str] = []

        if not draft.title.strip():
            errors.append("Titulo obrigatorio")
        if not draft.questions:
            errors.append("Quiz precisa de pelo menos uma questao")

        duplicated = [qid for qid, count in Counter(q.id for q in draft.questions).items() if count > 1]
        for qid in duplicated:
            errors.append(f"ID de questao duplicado: {qid}")

        for number, question in enumerate(draft.questions, start=1):
            self._check_question(number, question, errors, warnings)

        self._check_settings(draft, errors, warnings)

        if draft.is_published and draft.questions and draft.total_points <= 0:
            errors.append("Quiz publicado precisa somar mais de 0 pontos")

        if errors:
            logger.debug(f"Rascunho {draft.id} invalido: {len(errors)} erro(s)")

        return QuizValidation(is_valid=not errors, errors=errors, warnings=warnings)

    def _check_question(
        self, number: int, question: Question, errors: list[str], warnings: list[str]
    ) -> None:
        prefix = f"Questao {number}"

        if not question.question.strip():
            errors.append(f"{prefix}: enunciado obrigatorio")
        if question.points <= 0:
            errors.append(f"{prefix}: pontos devem ser maiores que 0")

        qtype = QuestionType(question.type)

        if isinstance(question, (MultipleChoiceQuestion, MultipleSelectQuestion)):
            if len(question.options) < self.MIN_OPTIONS:
                errors.append(f"{prefix}: precisa de pelo menos {self.MIN_OPTIONS} alternativas")
            for index, option in enumerate(question.options, start=1):
                if not option.text.strip():
                    errors.append(f"{prefix}: alternativa {index} sem texto")
            if not question.correct_option_ids:
                errors.append(f"{prefix}: marque pelo menos uma alternativa correta")
            duplicated = [oid for oid, count in Counter(question.option_ids).items() if count > 1]
            for oid in duplicated:
                errors.append(f"{prefix}: ID de alternativa duplicado: {oid}")
            if qtype == QuestionType.MULTIPLE_CHOICE and len(question.correct_option_ids) > 1:
                warnings.append(
                    f"{prefix}: escolha unica com mais de uma alternativa correta; "
                    "qualquer uma delas sera aceita"
                )

        elif isinstance(question, ShortAnswerQuestion):
            if not question.correct_answer.strip():
                errors.append(f"{prefix}: resposta correta obrigatoria")

        elif isinstance(question, EssayQuestion):
            if not question.sample_answer.strip():
                errors.append(f"{prefix}: resposta modelo obrigatoria")
            if (
                question.min_length is not None
                and question.max_length is not None
                and question.min_length > question.max_length
            ):
                errors.append(f"{prefix}: tamanho minimo maior que o maximo")

        elif isinstance(question, FillBlankQuestion):
            if not question.correct_answer:
                errors.append(f"{prefix}: informe a resposta de cada lacuna")
            elif any(not blank.strip() for blank in question.correct_answer):
                warnings.append(f"{prefix}: existe lacuna com resposta vazia")
            if len(question.acceptable_answers) > question.blank_count:
                warnings.append(f"{prefix}: sinonimos informados para lacunas inexistentes")

    def _check_settings(self, draft: Quiz, errors: list[str], warnings: list[str]) -> None:
        settings = draft.settings

        if not 0 <= settings.passing_score <= 100:
            errors.append("Nota de aprovacao deve estar entre 0 e 100")
        if settings.max_attempts is not None and settings.max_attempts < 1:
            errors.append("Maximo de tentativas deve ser pelo menos 1")
        if settings.time_limit_minutes is not None and settings.time_limit_minutes <= 0:
            errors.append("Limite de tempo deve ser maior que 0 minutos")

        if not settings.allow_multiple_attempts and (settings.max_attempts or 0) > 1:
            warnings.append(
                "Maximo de tentativas ignorado: multiplas tentativas estao desativadas"
            )


class AnswerInputValidator:
    """Checagens de entrada de resposta (nunca afetam a correcao)."""

    def validate(self, question: Question, value: Any) -> list[str]:
        errors: list[str] = []
        if value is None:
            return errors

        if isinstance(question, EssayQuestion):
            if not isinstance(value, str):
                errors.append("Resposta dissertativa deve ser texto")
                return errors
            length = len(value.strip())
            if question.min_length is not None and length < question.min_length:
                errors.append(f"Resposta precisa de pelo menos {question.min_length} caracteres")
            if question.max_length is not None and length > question.max_length:
                errors.append(f"Resposta excede {question.max_length} caracteres")

        elif isinstance(question, FillBlankQuestion):
            if isinstance(value, list) and len(value) != question.blank_count:
                errors.append(f"Esperadas {question.blank_count} lacunas, recebidas {len(value)}")

        elif isinstance(question, MultipleSelectQuestion):
            if not isinstance(value, list):
                errors.append("Multipla selecao espera uma lista de alternativas")
            else:
                unknown = [oid for oid in value if oid not in question.option_ids]
                if unknown:
                    errors.append(f"Alternativas desconhecidas: {', '.join(unknown)}")

        elif isinstance(question, MultipleChoiceQuestion):
            if not isinstance(value, str) or value not in question.option_ids:
                errors.append(f"Alternativa desconhecida: {value}")

        return errors


_validator = QuizValidator()
_answer_validator = AnswerInputValidator()


def validate_quiz(draft: Quiz) -> list[str]:
    """Erros de autoria do rascunho; vazio = publicavel."""
    return _validator.validate(draft)


def check_quiz(draft: Quiz) -> QuizValidation:
    return _validator.check(draft)


def validate_answer_input(question: Question, value: Any) -> list[str]:
    return _answer_validator.validate(question, value)
