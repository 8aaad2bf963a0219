"""Quiz Statistics Aggregator - Metricas derivadas de tentativas finalizadas."""

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timezone

from ..models.enums import QuestionDifficulty
from ..models.questions import MultipleChoiceQuestion, MultipleSelectQuestion, Question
from ..models.schemas import (
    Attempt,
    OptionStatistics,
    QuestionStatistics,
    Quiz,
    QuizStatistics,
)

logger = logging.getLogger(__name__)


class QuizStatisticsAggregator:
    """Recalcula estatisticas do zero a cada chamada (sem estado incremental).

    Somente tentativas finalizadas do quiz informado entram na conta;
    abertas, abandonadas ou de outros quizzes sao ignoradas.

    Faixas de dificuldade estimada (media das notas):
        - >= 80: easy
        - >= 60: medium
        - < 60: hard
    """

    DIFFICULTY_THRESHOLDS = [
        (80, QuestionDifficulty.EASY),
        (60, QuestionDifficulty.MEDIUM),
        (0, QuestionDifficulty.HARD),
    ]

    def estimate_difficulty(self, average_score: float) -> QuestionDifficulty:
        for threshold, difficulty in self.DIFFICULTY_THRESHOLDS:
            if average_score >= threshold:
                return difficulty
        return QuestionDifficulty.HARD

    def compute(
        self, quiz_id: str, attempts: Iterable[Attempt], quiz: Quiz | None = None
    ) -> QuizStatistics:
        """Calcula as estatisticas do quiz.

        Args:
            quiz_id: ID do quiz
            attempts: Snapshot das tentativas (qualquer status)
            quiz: Quiz opcional, necessario para metricas por questao

        Returns:
            QuizStatistics com totais, media, taxa de aprovacao e melhor nota por aluno
        """
        finalized = [a for a in attempts if a.quiz_id == quiz_id and a.is_finalized]
        now = datetime.now(timezone.utc)

        if not finalized:
            return QuizStatistics(quiz_id=quiz_id, last_updated=now)

        scores = [a.score for a in finalized]
        passed = sum(1 for a in finalized if a.passed)
        average = sum(scores) / len(scores)

        best_scores: dict[str, int] = {}
        for attempt in finalized:
            best_scores[attempt.user_id] = max(best_scores.get(attempt.user_id, 0), attempt.score)

        stats = QuizStatistics(
            quiz_id=quiz_id,
            total_attempts=len(finalized),
            unique_users=len(best_scores),
            average_score=average,
            pass_rate=passed / len(finalized) * 100,
            best_scores=best_scores,
            highest_score=max(scores),
            lowest_score=min(scores),
            average_time_spent=sum(a.elapsed_seconds for a in finalized) / len(finalized) / 60,
            estimated_difficulty=self.estimate_difficulty(average),
            question_stats=self._question_stats(quiz, finalized) if quiz else [],
            last_updated=now,
        )

        logger.debug(
            f"Estatisticas do quiz {quiz_id}: {stats.total_attempts} tentativas, "
            f"media {stats.average_score:.1f}"
        )
        return stats

    def _question_stats(self, quiz: Quiz, attempts: list[Attempt]) -> list[QuestionStatistics]:
        return [self._stats_for(question, attempts) for question in quiz.questions]

    def _stats_for(self, question: Question, attempts: list[Attempt]) -> QuestionStatistics:
        responses = 0
        correct = 0
        incorrect = 0
        selections: Counter[str] = Counter()

        for attempt in attempts:
            answer = attempt.answer_for(question.id)
            if answer is None or not answer.is_answered:
                continue
            responses += 1
            if answer.is_correct is True:
                correct += 1
            elif answer.is_correct is False:
                incorrect += 1

            if isinstance(answer.value, list):
                selections.update(v for v in answer.value if isinstance(v, str))
            elif isinstance(answer.value, str):
                selections[answer.value] += 1

        option_stats = []
        if isinstance(question, (MultipleChoiceQuestion, MultipleSelectQuestion)):
            option_stats = [
                OptionStatistics(
                    option_id=option.id,
                    option_text=option.text,
                    selected_count=selections[option.id],
                    percentage=(selections[option.id] / responses * 100) if responses else 0.0,
                )
                for option in question.options
            ]

        graded = correct + incorrect
        return QuestionStatistics(
            question_id=question.id,
            question_text=question.question,
            total_responses=responses,
            correct_responses=correct,
            incorrect_responses=incorrect,
            accuracy=(correct / graded * 100) if graded else 0.0,
            option_stats=option_stats,
        )

    def best_attempt(self, attempts: Iterable[Attempt], user_id: str) -> Attempt | None:
        """Tentativa finalizada de maior nota do usuario (a primeira em caso de empate)."""
        best: Attempt | None = None
        for attempt in attempts:
            if attempt.user_id != user_id or not attempt.is_finalized:
                continue
            if best is None or attempt.score > best.score:
                best = attempt
        return best


_aggregator = QuizStatisticsAggregator()


def compute_statistics(
    quiz_id: str, attempts: Iterable[Attempt], quiz: Quiz | None = None
) -> QuizStatistics:
    return _aggregator.compute(quiz_id, attempts, quiz)


def best_attempt(attempts: Iterable[Attempt], user_id: str) -> Attempt | None:
    return _aggregator.best_attempt(attempts, user_id)
