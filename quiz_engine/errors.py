"""Excecoes do Quiz Engine.

Erros de validacao de autoria nao aparecem aqui: o validador devolve uma
lista de mensagens, nunca levanta excecao.
"""

from .models.enums import AttemptStatus, RejectionReason

REJECTION_MESSAGES = {
    RejectionReason.QUIZ_NOT_PUBLISHED: "Quiz ainda nao foi publicado",
    RejectionReason.NO_QUESTIONS: "Quiz nao possui questoes",
    RejectionReason.MULTIPLE_ATTEMPTS_DISABLED: "Nenhuma tentativa restante",
    RejectionReason.MAX_ATTEMPTS_REACHED: "Nenhuma tentativa restante",
}


class QuizEngineError(Exception):
    """Base de todos os erros do engine."""


class AttemptRejected(QuizEngineError):
    """Inicio de tentativa recusado pela politica de tentativas."""

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        self.message = REJECTION_MESSAGES[reason]
        super().__init__(f"{self.message} ({reason.value})")


class IllegalTransitionError(QuizEngineError):
    """Evento entregue a uma tentativa que nao aceita mais transicoes.

    Indica defeito de integracao (ex: envio duplicado); a tentativa
    permanece inalterada.
    """

    def __init__(self, attempt_id: str, status: AttemptStatus, event: str):
        self.attempt_id = attempt_id
        self.status = status
        self.event = event
        super().__init__(
            f"Evento '{event}' recusado: tentativa {attempt_id} esta em '{status.value}'"
        )


class UnknownQuestionError(QuizEngineError):
    """Questao nao pertence a tentativa."""

    def __init__(self, attempt_id: str, question_id: str):
        self.attempt_id = attempt_id
        self.question_id = question_id
        super().__init__(f"Questao {question_id} nao existe na tentativa {attempt_id}")


class InvalidAnswerValueError(QuizEngineError):
    """Valor de resposta fora do formato aceito (booleano, texto ou lista de textos)."""

    def __init__(self, attempt_id: str, question_id: str, value: object):
        self.attempt_id = attempt_id
        self.question_id = question_id
        self.value = value
        super().__init__(
            f"Valor invalido para a questao {question_id} na tentativa {attempt_id}: {value!r}"
        )


class QuizNotFoundError(QuizEngineError):
    def __init__(self, quiz_id: str):
        self.quiz_id = quiz_id
        super().__init__(f"Quiz {quiz_id} nao encontrado")


class AttemptNotFoundError(QuizEngineError):
    def __init__(self, attempt_id: str):
        self.attempt_id = attempt_id
        super().__init__(f"Tentativa {attempt_id} nao encontrada")
