"""Quiz Results - Resumo de uma tentativa finalizada para o aluno."""

from collections.abc import Iterable
from typing import Any

from ..errors import IllegalTransitionError
from ..models.questions import (
    EssayQuestion,
    FillBlankQuestion,
    MultipleChoiceQuestion,
    MultipleSelectQuestion,
    Question,
    ShortAnswerQuestion,
    TrueFalseQuestion,
)
from ..models.schemas import Answer, Attempt, QuestionResult, Quiz, QuizResults
from .grading_engine import percentage
from .statistics import QuizStatisticsAggregator


def correct_answer_for(question: Question) -> Any:
    """Gabarito exibivel da questao (resposta modelo para dissertativas)."""
    if isinstance(question, MultipleChoiceQuestion):
        return question.correct_option_id
    if isinstance(question, MultipleSelectQuestion):
        return question.correct_option_ids
    if isinstance(question, (TrueFalseQuestion, ShortAnswerQuestion, FillBlankQuestion)):
        return question.correct_answer
    if isinstance(question, EssayQuestion):
        return question.sample_answer
    return None


class QuizResultsBuilder:
    """Monta ``QuizResults`` respeitando as configuracoes de exibicao do quiz.

    - show_correct_answers: inclui o gabarito de cada questao
    - show_explanations: inclui a explicacao de cada questao
    - allow_review: sem revisao, a lista por questao fica vazia
    """

    def __init__(self, aggregator: QuizStatisticsAggregator | None = None):
        self.aggregator = aggregator or QuizStatisticsAggregator()

    def build(
        self, quiz: Quiz, attempt: Attempt, history: Iterable[Attempt] = ()
    ) -> QuizResults:
        if not attempt.is_finalized:
            raise IllegalTransitionError(attempt.id, attempt.status, "results")

        settings = quiz.settings
        answers = {answer.question_id: answer for answer in attempt.answers}

        correct = incorrect = unanswered = pending = 0
        question_results = []

        for question in quiz.questions:
            answer = answers.get(question.id) or Answer(
                question_id=question.id, question_type=question.type
            )
            if not answer.is_answered:
                unanswered += 1
            elif answer.is_correct is None:
                pending += 1
            elif answer.is_correct:
                correct += 1
            else:
                incorrect += 1

            if settings.allow_review:
                question_results.append(
                    QuestionResult(
                        question_id=question.id,
                        question_text=question.question,
                        answer=answer,
                        is_correct=answer.is_correct,
                        show_correct_answer=settings.show_correct_answers,
                        show_explanation=settings.show_explanations,
                        correct_answer=(
                            correct_answer_for(question) if settings.show_correct_answers else None
                        ),
                        explanation=question.explanation if settings.show_explanations else None,
                    )
                )

        # Dissertativas pendentes nao entram na precisao automatica
        auto_graded = len(quiz.questions) - pending
        user_history = [
            a
            for a in history
            if a.quiz_id == quiz.id and a.user_id == attempt.user_id and a.is_finalized
        ]
        if all(a.id != attempt.id for a in user_history):
            user_history.append(attempt)

        quiz_history = [a for a in history if a.quiz_id == quiz.id and a.is_finalized]
        average = None
        if quiz_history:
            average = self.aggregator.compute(quiz.id, quiz_history).average_score

        best = self.aggregator.best_attempt(user_history, attempt.user_id)

        return QuizResults(
            attempt=attempt,
            correct_count=correct,
            incorrect_count=incorrect,
            unanswered_count=unanswered,
            pending_review_count=pending,
            accuracy=float(percentage(correct, auto_graded)),
            question_results=question_results,
            attempts_count=len(user_history),
            best_score=best.score if best else None,
            average_score=average,
        )


def build_results(quiz: Quiz, attempt: Attempt, history: Iterable[Attempt] = ()) -> QuizResults:
    return QuizResultsBuilder().build(quiz, attempt, history)
