"""Quiz Grading Engine - Correcao por tipo de questao e calculo de nota."""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ..models.enums import QuestionType
from ..models.questions import (
    EssayQuestion,
    FillBlankQuestion,
    MultipleChoiceQuestion,
    MultipleSelectQuestion,
    Question,
    ShortAnswerQuestion,
    TrueFalseQuestion,
)
from ..models.schemas import Answer, GradeResult, Quiz, ScoreSummary, is_blank

logger = logging.getLogger(__name__)


class GradingInconsistency(Exception):
    """Valor com formato incompativel com o tipo da questao.

    Uso interno: o engine captura, registra e corrige como errada com 0
    pontos, para que uma resposta malformada nao aborte a finalizacao.
    """


def _normalize(text: str, case_sensitive: bool) -> str:
    text = text.strip()
    return text if case_sensitive else text.lower()


def _matches_any(submitted: str, accepted: Sequence[str], case_sensitive: bool) -> bool:
    target = _normalize(submitted, case_sensitive)
    return any(target == _normalize(candidate, case_sensitive) for candidate in accepted)


def _require_str(value: Any, question: Question) -> str:
    if not isinstance(value, str):
        raise GradingInconsistency(
            f"{question.type} espera texto, recebido {type(value).__name__}"
        )
    return value


def _check_multiple_choice(question: MultipleChoiceQuestion, value: Any) -> bool:
    selected = _require_str(value, question)
    return selected in question.correct_option_ids


def _check_multiple_select(question: MultipleSelectQuestion, value: Any) -> bool:
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise GradingInconsistency(
            f"multiple_select espera lista, recebido {type(value).__name__}"
        )
    if not all(isinstance(item, str) for item in value):
        raise GradingInconsistency("multiple_select espera lista de IDs de alternativa")
    # Conjunto exato, sem credito parcial
    return set(value) == set(question.correct_option_ids)


def _check_true_false(question: TrueFalseQuestion, value: Any) -> bool:
    if isinstance(value, bool):
        return value == question.correct_answer
    # IDs do par fixo de alternativas ("true"/"false")
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return (value.strip().lower() == "true") == question.correct_answer
    raise GradingInconsistency(f"true_false espera booleano, recebido {value!r}")


def _check_short_answer(question: ShortAnswerQuestion, value: Any) -> bool:
    submitted = _require_str(value, question)
    accepted = [question.correct_answer, *question.acceptable_answers]
    return _matches_any(submitted, accepted, question.case_sensitive)


def _check_fill_blank(question: FillBlankQuestion, value: Any) -> bool:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise GradingInconsistency(f"fill_blank espera lista, recebido {type(value).__name__}")
    if not all(isinstance(item, str) for item in value):
        raise GradingInconsistency("fill_blank espera uma string por lacuna")

    if len(value) != question.blank_count:
        return False

    for index, (submitted, expected) in enumerate(zip(value, question.correct_answer)):
        accepted = [expected, *question.synonyms_for(index)]
        if not _matches_any(submitted, accepted, question.case_sensitive):
            return False
    return True


def _check_essay(question: EssayQuestion, value: Any) -> None:
    """Correcao manual: texto fica indeterminado, outro formato e inconsistente."""
    _require_str(value, question)
    return None


class QuizGradingEngine:
    """Motor de correcao: (questao, resposta) -> (correta, pontos).

    Funcao pura e deterministica, sem estado mutavel compartilhado:
    corrigir a mesma resposta duas vezes da sempre o mesmo resultado, e
    o engine pode ser usado em paralelo por tentativas diferentes.

    Politicas:
        - multiple_choice: ID enviado igual ao ID correto
        - multiple_select: conjunto enviado igual ao conjunto correto
        - true_false: booleano enviado igual ao armazenado
        - short_answer: texto aparado, comparado com resposta e sinonimos
        - fill_blank: mesma regra por lacuna, todas precisam bater
        - essay: indeterminado, 0 pontos ate correcao manual

    Pontuacao e sempre tudo ou nada. Questao sem resposta vale 0 e e
    considerada errada, seja qual for o tipo.

    Example:
        >>> engine = QuizGradingEngine()
        >>> engine.grade(question, "b")
        GradeResult(is_correct=True, points_earned=2)
    """

    CHECKERS: dict[QuestionType, Callable[[Any, Any], bool | None]] = {
        QuestionType.MULTIPLE_CHOICE: _check_multiple_choice,
        QuestionType.MULTIPLE_SELECT: _check_multiple_select,
        QuestionType.TRUE_FALSE: _check_true_false,
        QuestionType.SHORT_ANSWER: _check_short_answer,
        QuestionType.FILL_BLANK: _check_fill_blank,
        QuestionType.ESSAY: _check_essay,
    }

    def grade(self, question: Question, value: Any) -> GradeResult:
        """Corrige uma resposta individual.

        Args:
            question: Questao respondida
            value: Valor bruto enviado (None = nao respondida)

        Returns:
            GradeResult com is_correct (None = indeterminado) e pontos
        """
        if is_blank(value):
            return GradeResult(is_correct=False, points_earned=0)

        checker = self.CHECKERS[QuestionType(question.type)]
        try:
            is_correct = checker(question, value)
        except GradingInconsistency as exc:
            logger.warning(
                f"Resposta inconsistente na questao {question.id}: {exc}",
                extra={
                    "event_type": "grading_inconsistency",
                    "question_id": question.id,
                    "question_type": question.type,
                },
            )
            return GradeResult(is_correct=False, points_earned=0)

        points = max(question.points, 0) if is_correct else 0
        return GradeResult(is_correct=is_correct, points_earned=points)

    def grade_answers(self, quiz: Quiz, answers: Sequence[Answer]) -> tuple[Answer, ...]:
        """Corrige todas as questoes do quiz, na ordem do quiz.

        Questoes sem slot de resposta sao corrigidas como nao respondidas;
        respostas de questoes que nao existem no quiz sao descartadas.
        """
        by_question = {answer.question_id: answer for answer in answers}
        graded = []

        for question in quiz.questions:
            answer = by_question.get(question.id) or Answer(
                question_id=question.id, question_type=question.type
            )
            if QuestionType(answer.question_type) != QuestionType(question.type):
                logger.warning(
                    f"Tipo da resposta ({answer.question_type}) difere da questao "
                    f"{question.id} ({question.type})",
                    extra={"event_type": "grading_inconsistency", "question_id": question.id},
                )
                result = GradeResult(is_correct=False, points_earned=0)
            else:
                result = self.grade(question, answer.value)

            graded.append(
                answer.model_copy(
                    update={
                        # Lista propria: a tentativa finalizada nao compartilha estado
                        "value": list(answer.value)
                        if isinstance(answer.value, list)
                        else answer.value,
                        "is_correct": result.is_correct,
                        "points_earned": result.points_earned,
                        "points_possible": question.points,
                    }
                )
            )

        return tuple(graded)

    def calculate_score(self, quiz: Quiz, graded: Sequence[Answer]) -> ScoreSummary:
        """Consolida pontos em nota 0-100 (arredondamento meio para cima)."""
        total_points = quiz.total_points
        points_earned = sum(answer.points_earned or 0 for answer in graded)
        score = percentage(points_earned, total_points)

        return ScoreSummary(
            points_earned=points_earned,
            total_points=total_points,
            score=score,
            passed=score >= quiz.settings.passing_score,
        )


def percentage(part: int, total: int) -> int:
    """round(100 * part / total) com meio para cima; 0 quando total <= 0."""
    if total <= 0:
        return 0
    return (200 * part + total) // (2 * total)


_engine = QuizGradingEngine()


def grade(question: Question, value: Any) -> GradeResult:
    """Atalho para ``QuizGradingEngine().grade``."""
    return _engine.grade(question, value)
