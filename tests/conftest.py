# =============================================================================
# CONFTEST - Fixtures compartilhadas para todos os testes
# =============================================================================
# Centraliza quizzes de exemplo, relogio fixo e store em memoria
# =============================================================================

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest


# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Configura ambiente de testes globalmente."""
    env_vars = {
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "ERROR",  # Reduzir logs em testes
    }
    with patch.dict(os.environ, env_vars):
        yield


@pytest.fixture
def clean_env():
    """Limpa variáveis de ambiente para testes isolados."""
    with patch.dict(os.environ, {}, clear=True):
        yield


# =============================================================================
# FIXTURES DE TEMPO
# =============================================================================


class FakeClock:
    """Relogio controlado: cada chamada devolve o instante atual."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def fake_clock():
    """Relogio fixo em 2024-01-15 12:00 UTC."""
    return FakeClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def machine(fake_clock):
    """Maquina de estados com relogio controlado."""
    from quiz_engine.engine.attempt_machine import AttemptStateMachine

    return AttemptStateMachine(clock=fake_clock)


# =============================================================================
# FIXTURES DE QUESTOES
# =============================================================================


@pytest.fixture
def mc_question():
    """Multipla escolha, 2 pontos, correta 'b'."""
    from quiz_engine.models.questions import MultipleChoiceQuestion, QuestionOption

    return MultipleChoiceQuestion(
        id="q-mc",
        question="Qual e a capital da Franca?",
        points=2,
        options=[
            QuestionOption(id="a", text="Londres"),
            QuestionOption(id="b", text="Paris", is_correct=True),
            QuestionOption(id="c", text="Roma"),
        ],
        explanation="Paris e a capital da Franca.",
    )


@pytest.fixture
def ms_question():
    """Multipla selecao, 3 pontos, corretas {'x', 'y'}."""
    from quiz_engine.models.questions import MultipleSelectQuestion, QuestionOption

    return MultipleSelectQuestion(
        id="q-ms",
        question="Quais sao numeros primos?",
        points=3,
        options=[
            QuestionOption(id="x", text="2", is_correct=True),
            QuestionOption(id="y", text="3", is_correct=True),
            QuestionOption(id="z", text="4"),
        ],
    )


@pytest.fixture
def tf_question():
    from quiz_engine.models.questions import TrueFalseQuestion

    return TrueFalseQuestion(id="q-tf", question="A Terra e redonda?", points=1, correct_answer=True)


@pytest.fixture
def short_question():
    """Resposta curta 'Paris', sem diferenciar maiusculas."""
    from quiz_engine.models.questions import ShortAnswerQuestion

    return ShortAnswerQuestion(
        id="q-short",
        question="Capital da Franca?",
        points=1,
        correct_answer="Paris",
        acceptable_answers=["Cidade Luz"],
    )


@pytest.fixture
def fill_question():
    from quiz_engine.models.questions import FillBlankQuestion

    return FillBlankQuestion(
        id="q-fill",
        question="A agua ferve a ___ graus ___.",
        points=2,
        correct_answer=["100", "Celsius"],
        acceptable_answers=[["cem"], ["C", "centigrados"]],
    )


@pytest.fixture
def essay_question():
    from quiz_engine.models.questions import EssayQuestion

    return EssayQuestion(
        id="q-essay",
        question="Explique a fotossintese.",
        points=5,
        sample_answer="Processo em que plantas convertem luz em energia quimica.",
        min_length=10,
        max_length=500,
    )


@pytest.fixture
def all_questions(
    mc_question, ms_question, tf_question, short_question, fill_question, essay_question
):
    return [mc_question, ms_question, tf_question, short_question, fill_question, essay_question]


# =============================================================================
# FIXTURES DE QUIZ
# =============================================================================


@pytest.fixture
def make_quiz():
    """Factory de quizzes publicados."""

    def _make_quiz(questions, quiz_id="quiz-1", **settings):
        from quiz_engine.models.schemas import Quiz, QuizSettings

        return Quiz(
            id=quiz_id,
            title="Quiz de Teste",
            description="Quiz usado nos testes",
            questions=questions,
            settings=QuizSettings(**settings),
            is_published=True,
        )

    return _make_quiz


@pytest.fixture
def sample_quiz(make_quiz, all_questions):
    """Quiz com os seis tipos de questao (14 pontos), aprovacao 70."""
    return make_quiz(all_questions, passing_score=70)


@pytest.fixture
def two_question_quiz(make_quiz):
    """Duas questoes de 5 pontos, aprovacao 70."""
    from quiz_engine.models.questions import TrueFalseQuestion

    return make_quiz(
        [
            TrueFalseQuestion(id="t1", question="Um?", points=5, correct_answer=True),
            TrueFalseQuestion(id="t2", question="Dois?", points=5, correct_answer=False),
        ],
        passing_score=70,
    )


@pytest.fixture
def timed_quiz(make_quiz):
    """10 minutos, uma questao de 1 ponto."""
    from quiz_engine.models.questions import TrueFalseQuestion

    return make_quiz(
        [TrueFalseQuestion(id="t1", question="Verdadeiro?", points=1, correct_answer=True)],
        quiz_id="quiz-timed",
        passing_score=50,
        time_limit_minutes=10,
    )


@pytest.fixture
def store():
    """QuizStore sobre KV em memoria."""
    from quiz_engine.storage import MemoryKV, QuizStore

    return QuizStore(MemoryKV())


@pytest.fixture
def capture_logs(caplog):
    """Captura logs para verificação em testes."""
    import logging

    caplog.set_level(logging.DEBUG)
    # create_app() aplica LOG_LEVEL=ERROR no logger do pacote
    caplog.set_level(logging.DEBUG, logger="quiz_engine")
    return caplog
