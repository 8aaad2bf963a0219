# =============================================================================
# TESTES - Quiz Validator
# =============================================================================
# Testes unitarios para validacao de rascunhos e de entrada de respostas
# =============================================================================


class TestValidQuiz:
    """Rascunho completo nao gera erros."""

    def test_sample_quiz_is_valid(self, sample_quiz):
        from quiz_engine.engine.validator import validate_quiz

        assert validate_quiz(sample_quiz) == []

    def test_check_reports_is_valid(self, sample_quiz):
        from quiz_engine.engine.validator import check_quiz

        result = check_quiz(sample_quiz)

        assert result.is_valid is True
        assert result.errors == []


class TestQuizLevelRules:
    """Regras do quiz como um todo."""

    def test_empty_draft_collects_all_errors(self):
        """Titulo vazio e sem questoes: dois erros, sem short-circuit."""
        from quiz_engine.engine.validator import validate_quiz
        from quiz_engine.models.schemas import Quiz

        errors = validate_quiz(Quiz(id="d1", title="  "))

        assert errors == ["Titulo obrigatorio", "Quiz precisa de pelo menos uma questao"]

    def test_passing_score_out_of_range(self, sample_quiz):
        from quiz_engine.engine.validator import validate_quiz

        draft = sample_quiz.model_copy(
            update={"settings": sample_quiz.settings.model_copy(update={"passing_score": 101})}
        )

        assert "Nota de aprovacao deve estar entre 0 e 100" in validate_quiz(draft)

    def test_max_attempts_below_one(self, sample_quiz):
        from quiz_engine.engine.validator import validate_quiz

        draft = sample_quiz.model_copy(
            update={"settings": sample_quiz.settings.model_copy(update={"max_attempts": 0})}
        )

        assert "Maximo de tentativas deve ser pelo menos 1" in validate_quiz(draft)

    def test_duplicate_question_ids(self, make_quiz, tf_question):
        from quiz_engine.engine.validator import validate_quiz

        draft = make_quiz([tf_question, tf_question.model_copy()])

        assert "ID de questao duplicado: q-tf" in validate_quiz(draft)

    def test_published_without_points(self, make_quiz, tf_question):
        """Quiz publicado precisa de pontos."""
        from quiz_engine.engine.validator import validate_quiz

        draft = make_quiz([tf_question.model_copy(update={"points": 0})])

        errors = validate_quiz(draft)

        assert "Questao 1: pontos devem ser maiores que 0" in errors
        assert "Quiz publicado precisa somar mais de 0 pontos" in errors

    def test_warning_for_ignored_max_attempts(self, make_quiz, tf_question):
        """Aviso nao bloqueia publicacao."""
        from quiz_engine.engine.validator import check_quiz

        draft = make_quiz([tf_question], allow_multiple_attempts=False, max_attempts=3)

        result = check_quiz(draft)

        assert result.is_valid is True
        assert len(result.warnings) == 1


class TestQuestionRules:
    """Regras por questao."""

    def test_prompt_and_points(self, make_quiz, tf_question):
        from quiz_engine.engine.validator import validate_quiz

        draft = make_quiz([tf_question.model_copy(update={"question": "", "points": -1})])

        errors = validate_quiz(draft)

        assert "Questao 1: enunciado obrigatorio" in errors
        assert "Questao 1: pontos devem ser maiores que 0" in errors

    def test_choice_question_rules(self, make_quiz):
        """Poucas alternativas, texto vazio e nenhuma correta."""
        from quiz_engine.engine.validator import validate_quiz
        from quiz_engine.models.questions import MultipleSelectQuestion, QuestionOption

        question = MultipleSelectQuestion(
            id="ms", question="Escolha", points=1, options=[QuestionOption(id="a", text="")]
        )

        errors = validate_quiz(make_quiz([question]))

        assert "Questao 1: precisa de pelo menos 2 alternativas" in errors
        assert "Questao 1: alternativa 1 sem texto" in errors
        assert "Questao 1: marque pelo menos uma alternativa correta" in errors

    def test_multiple_correct_in_single_choice_is_warning(self, make_quiz, mc_question):
        from quiz_engine.engine.validator import check_quiz

        options = [o.model_copy(update={"is_correct": True}) for o in mc_question.options]
        draft = make_quiz([mc_question.model_copy(update={"options": options})])

        result = check_quiz(draft)

        assert result.is_valid is True
        assert result.warnings

    def test_short_answer_requires_answer(self, make_quiz, short_question):
        from quiz_engine.engine.validator import validate_quiz

        draft = make_quiz([short_question.model_copy(update={"correct_answer": "  "})])

        assert validate_quiz(draft) == ["Questao 1: resposta correta obrigatoria"]

    def test_essay_requires_sample(self, make_quiz, essay_question):
        from quiz_engine.engine.validator import validate_quiz

        draft = make_quiz([essay_question.model_copy(update={"sample_answer": ""})])

        assert validate_quiz(draft) == ["Questao 1: resposta modelo obrigatoria"]

    def test_essay_length_bounds(self, make_quiz, essay_question):
        from quiz_engine.engine.validator import validate_quiz

        draft = make_quiz(
            [essay_question.model_copy(update={"min_length": 100, "max_length": 10})]
        )

        assert validate_quiz(draft) == ["Questao 1: tamanho minimo maior que o maximo"]

    def test_fill_blank_requires_answers(self, make_quiz, fill_question):
        from quiz_engine.engine.validator import validate_quiz

        draft = make_quiz(
            [fill_question.model_copy(update={"correct_answer": [], "acceptable_answers": []})]
        )

        assert validate_quiz(draft) == ["Questao 1: informe a resposta de cada lacuna"]

    def test_errors_numbered_by_position(self, make_quiz, tf_question, short_question):
        from quiz_engine.engine.validator import validate_quiz

        draft = make_quiz(
            [tf_question, short_question.model_copy(update={"correct_answer": ""})]
        )

        assert validate_quiz(draft) == ["Questao 2: resposta correta obrigatoria"]


class TestAnswerInput:
    """Validacao de entrada de respostas."""

    def test_essay_length(self, essay_question):
        from quiz_engine.engine.validator import validate_answer_input

        assert validate_answer_input(essay_question, "curta") == [
            "Resposta precisa de pelo menos 10 caracteres"
        ]
        assert validate_answer_input(essay_question, "x" * 501) == ["Resposta excede 500 caracteres"]
        assert validate_answer_input(essay_question, "resposta suficiente") == []

    def test_unknown_option(self, mc_question, ms_question):
        from quiz_engine.engine.validator import validate_answer_input

        assert validate_answer_input(mc_question, "q") == ["Alternativa desconhecida: q"]
        assert validate_answer_input(ms_question, ["x", "w"]) == ["Alternativas desconhecidas: w"]

    def test_none_clears_without_errors(self, all_questions):
        from quiz_engine.engine.validator import validate_answer_input

        for question in all_questions:
            assert validate_answer_input(question, None) == []
