# =============================================================================
# TESTES - Quiz Game
# =============================================================================
# Testes unitarios para ciclo de vida, navegacao e submissao de respostas
# =============================================================================

import random

import pytest


def _game(questions, **config):
    from quizplay.config import QuizConfig
    from quizplay.engine.quiz_game import QuizGame

    return QuizGame.from_questions(questions, quiz_id="test-123", config=QuizConfig(**config))


def _text(value):
    from quizplay.models.values import TextValue

    return TextValue(value=value)


class TestQuizGameLifecycle:
    """Testes para transicoes de estado."""

    @pytest.mark.asyncio
    async def test_start_moves_to_in_progress(self, sample_questions):
        """Verifica NOT_STARTED -> IN_PROGRESS."""
        from quizplay.models.enums import QuizStatus

        game = _game(sample_questions)
        assert game.status == QuizStatus.NOT_STARTED

        result = await game.start_quiz()

        assert result.success is True
        assert game.status == QuizStatus.IN_PROGRESS
        assert game.state.start_time is not None
        assert game.state.current_question_index == 0

    @pytest.mark.asyncio
    async def test_start_twice_fails(self, sample_questions):
        """Verifica que iniciar duas vezes e rejeitado."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.start_quiz()

        assert result.success is False
        assert result.code == ErrorCode.INVALID_STATE_TRANSITION
        assert result.error

    @pytest.mark.asyncio
    async def test_operations_before_start_fail(self, sample_questions):
        """Verifica que responder/navegar antes de iniciar falha."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)

        submit = await game.submit_answer("q1", _text("B"))
        nxt = await game.next_question()

        assert submit.code == ErrorCode.INVALID_STATE_TRANSITION
        assert nxt.code == ErrorCode.INVALID_STATE_TRANSITION
        assert game.state.user_answers == {}

    @pytest.mark.asyncio
    async def test_pause_and_resume_preserve_progress(self, sample_questions):
        """Verifica que pausar/retomar nao altera cursor, score ou respostas."""
        from quizplay.models.enums import QuizStatus

        game = _game(sample_questions)
        await game.start_quiz()
        await game.submit_answer("q1", _text("B"))
        await game.next_question()

        before = (game.state.current_question_index, game.state.score, dict(game.state.user_answers))

        assert (await game.pause_quiz()).success
        assert game.status == QuizStatus.PAUSED
        assert (await game.resume_quiz()).success
        assert game.status == QuizStatus.IN_PROGRESS

        after = (game.state.current_question_index, game.state.score, dict(game.state.user_answers))
        assert before == after

    @pytest.mark.asyncio
    async def test_paused_rejects_answers_and_navigation(self, sample_questions):
        """Verifica que PAUSED rejeita submit e navegacao."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()
        await game.pause_quiz()

        assert (await game.submit_answer("q1", _text("B"))).code == ErrorCode.INVALID_STATE_TRANSITION
        assert (await game.next_question()).code == ErrorCode.INVALID_STATE_TRANSITION
        assert (await game.pause_quiz()).code == ErrorCode.INVALID_STATE_TRANSITION

    @pytest.mark.asyncio
    async def test_resume_requires_paused(self, sample_questions):
        """Verifica que retomar sem pausa falha."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.resume_quiz()

        assert result.code == ErrorCode.INVALID_STATE_TRANSITION

    @pytest.mark.asyncio
    async def test_end_is_idempotent(self, sample_questions):
        """Verifica que finalizar duas vezes e sucesso sem mudancas."""
        from quizplay.models.enums import QuizStatus

        game = _game(sample_questions)
        await game.start_quiz()
        await game.submit_answer("q1", _text("B"))

        first = await game.end_quiz()
        end_time = game.state.end_time
        second = await game.end_quiz()

        assert first.success and second.success
        assert game.status == QuizStatus.COMPLETED
        assert game.state.end_time == end_time
        assert game.state.score == 1.0

    @pytest.mark.asyncio
    async def test_completed_rejects_everything_else(self, sample_questions):
        """Verifica que COMPLETED e terminal."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()
        await game.end_quiz()

        assert (await game.start_quiz()).code == ErrorCode.INVALID_STATE_TRANSITION
        assert (await game.resume_quiz()).code == ErrorCode.INVALID_STATE_TRANSITION
        assert (await game.submit_answer("q1", _text("B"))).code == ErrorCode.INVALID_STATE_TRANSITION
        assert await game.get_current_question() is None

    @pytest.mark.asyncio
    async def test_end_from_paused_and_not_started(self, sample_questions):
        """Verifica finalizacao a partir de PAUSED e NOT_STARTED."""
        from quizplay.models.enums import QuizStatus

        paused = _game(sample_questions)
        await paused.start_quiz()
        await paused.pause_quiz()
        assert (await paused.end_quiz()).success
        assert paused.state.paused_at is None

        fresh = _game(sample_questions)
        assert (await fresh.end_quiz()).success
        assert fresh.status == QuizStatus.COMPLETED


class TestQuizGameScenario:
    """Cenario completo de tres questoes."""

    @pytest.mark.asyncio
    async def test_two_of_three_correct(self, sample_questions):
        """Verifica score 2 com B, A, B e fim em COMPLETED."""
        from quizplay.models.enums import ErrorCode, QuizStatus

        game = _game(sample_questions)
        await game.start_quiz()

        r1 = await game.submit_answer("q1", _text("B"))
        await game.next_question()
        r2 = await game.submit_answer("q2", _text("A"))
        await game.next_question()
        r3 = await game.submit_answer("q3", _text("B"))

        assert r1.answer.is_correct is True
        assert r2.answer.is_correct is False
        assert r3.answer.is_correct is True

        boundary = await game.next_question()
        assert boundary.success is False
        assert boundary.code == ErrorCode.NAVIGATION_BOUNDARY
        assert game.state.current_question_index == 2

        await game.end_quiz()
        assert game.status == QuizStatus.COMPLETED
        assert game.calculate_score() == 2.0
        assert game.state.score == 2.0


class TestQuizGameNavigation:
    """Testes para navegacao e limites."""

    @pytest.mark.asyncio
    async def test_previous_at_start_fails(self, sample_questions):
        """Verifica limite inferior com cursor inalterado."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.previous_question()

        assert result.code == ErrorCode.NAVIGATION_BOUNDARY
        assert game.state.current_question_index == 0

    @pytest.mark.asyncio
    async def test_next_and_previous(self, sample_questions):
        """Verifica ida e volta do cursor."""
        game = _game(sample_questions)
        await game.start_quiz()

        await game.next_question()
        await game.next_question()
        assert (await game.get_current_question()).id == "q3"

        await game.previous_question()
        assert (await game.get_current_question()).id == "q2"

    @pytest.mark.asyncio
    async def test_skip_records_no_answer(self, sample_questions):
        """Verifica que pular avanca sem registrar Answer."""
        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.skip_question()

        assert result.success is True
        assert game.state.current_question_index == 1
        assert game.state.user_answers == {}
        assert game.state.skipped_question_ids == ["q1"]

    @pytest.mark.asyncio
    async def test_skip_on_last_question_fails(self, sample_questions):
        """Verifica que pular a ultima questao e limite de navegacao."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()
        await game.next_question()
        await game.next_question()

        result = await game.skip_question()

        assert result.code == ErrorCode.NAVIGATION_BOUNDARY
        assert game.state.skipped_question_ids == []

    @pytest.mark.asyncio
    async def test_empty_quiz(self):
        """Verifica quiz vazio: inicia, sem questao atual, navegacao falha."""
        from quizplay.models.enums import ErrorCode

        game = _game([])
        assert (await game.start_quiz()).success

        assert await game.get_current_question() is None
        assert (await game.next_question()).code == ErrorCode.NAVIGATION_BOUNDARY
        assert (await game.end_quiz()).success
        assert game.state.score == 0.0

    @pytest.mark.asyncio
    async def test_current_question_none_before_start(self, sample_questions):
        """Verifica que nao ha questao atual antes de iniciar."""
        game = _game(sample_questions)

        assert await game.get_current_question() is None
        assert game.current_question is None


class TestQuizGameSubmission:
    """Testes para submissao de respostas."""

    @pytest.mark.asyncio
    async def test_unknown_question(self, sample_questions):
        """Verifica question_id inexistente."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.submit_answer("nope", _text("B"))

        assert result.code == ErrorCode.UNKNOWN_QUESTION
        assert game.state.user_answers == {}

    @pytest.mark.asyncio
    async def test_type_mismatch_leaves_state_unchanged(self, sample_questions):
        """Verifica AnswerTypeMismatch sem registrar resposta."""
        from quizplay.models.enums import ErrorCode
        from quizplay.models.values import NumberValue

        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.submit_answer("q1", NumberValue(value=2))

        assert result.code == ErrorCode.ANSWER_TYPE_MISMATCH
        assert game.state.user_answers == {}
        assert game.state.answer_history == []

    @pytest.mark.asyncio
    async def test_invalid_dict_payload(self, sample_questions):
        """Verifica dict que nao e AnswerValue valido."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.submit_answer("q1", {"type": "bogus", "value": 1})

        assert result.code == ErrorCode.ANSWER_TYPE_MISMATCH

    @pytest.mark.asyncio
    async def test_dict_payload_accepted(self, sample_questions):
        """Verifica dict validado como AnswerValue."""
        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.submit_answer("q1", {"type": "text", "value": "B"})

        assert result.success is True
        assert result.answer.is_correct is True

    @pytest.mark.asyncio
    async def test_resubmission_replaces_answer(self, sample_questions):
        """Verifica que reenvio substitui a resposta e o score."""
        game = _game(sample_questions)
        await game.start_quiz()

        await game.submit_answer("q1", _text("A"))
        assert game.calculate_score() == 0.0

        await game.submit_answer("q1", _text("B"))

        assert len(game.state.user_answers) == 1
        assert game.state.user_answers["q1"].is_correct is True
        assert game.calculate_score() == 1.0
        assert len(game.state.answer_history) == 2

    @pytest.mark.asyncio
    async def test_answer_order_follows_latest_submission(self, sample_questions):
        """Verifica que a ordem de user_answers e a ordem de submissao."""
        game = _game(sample_questions)
        await game.start_quiz()

        await game.submit_answer("q1", _text("A"))
        await game.next_question()
        await game.submit_answer("q2", _text("B"))
        await game.previous_question()
        await game.submit_answer("q1", _text("B"))

        assert list(game.state.user_answers) == ["q2", "q1"]

    @pytest.mark.asyncio
    async def test_answer_fields_are_engine_owned(self, sample_questions):
        """Verifica que corretude informada pelo cliente e ignorada."""
        from quizplay.models.schemas import Answer

        game = _game(sample_questions)
        await game.start_quiz()

        forged = Answer(question_id="q1", value=_text("A"), is_correct=True, score=99, time_spent=4.5)
        result = await game.submit_answer("q1", forged)

        assert result.answer.is_correct is False
        assert result.answer.score == 0.0
        assert result.answer.time_spent == 4.5
        assert result.answer.submitted_at is not None

    @pytest.mark.asyncio
    async def test_answer_for_other_question_id(self, sample_questions):
        """Verifica Answer com question_id divergente."""
        from quizplay.models.enums import ErrorCode
        from quizplay.models.schemas import Answer

        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.submit_answer("q1", Answer(question_id="q2", value=_text("B")))

        assert result.code == ErrorCode.UNKNOWN_QUESTION

    @pytest.mark.asyncio
    async def test_out_of_order_disabled(self, sample_questions):
        """Verifica que so a questao atual aceita resposta por padrao."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.submit_answer("q3", _text("B"))

        assert result.code == ErrorCode.UNKNOWN_QUESTION
        assert game.state.user_answers == {}

    @pytest.mark.asyncio
    async def test_out_of_order_enabled(self, sample_questions):
        """Verifica resposta fora de ordem quando permitido."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions, allow_out_of_order_submission=True)
        await game.start_quiz()

        result = await game.submit_answer("q3", _text("B"))
        again = await game.submit_answer("q3", _text("A"))

        assert result.success is True
        assert game.state.current_question_index == 0
        assert again.code == ErrorCode.INVALID_STATE_TRANSITION
        assert game.state.user_answers["q3"].is_correct is True

    @pytest.mark.asyncio
    async def test_weighted_points(self, make_question):
        """Verifica pontos ponderados por metadata.points."""
        game = _game([make_question("q1", points=2.5), make_question("q2")])
        await game.start_quiz()

        await game.submit_answer("q1", _text("B"))

        assert game.calculate_score() == 2.5
        assert game.state.metadata["total_points_possible"] == 3.5

    @pytest.mark.asyncio
    async def test_non_evaluated_answer_recorded(self):
        """Verifica que resposta aberta e registrada sem nota."""
        game = _game([{"type": "SURVEY", "id": "s1", "text": "Gostou?"}])
        await game.start_quiz()

        result = await game.submit_answer("s1", _text("sim"))

        assert result.success is True
        assert result.answer.evaluated is False
        assert game.calculate_score() == 0.0

    @pytest.mark.asyncio
    async def test_passage_submission(self, passage_question):
        """Verifica leitura com 1 de 2 sub-questoes corretas e peso 2."""
        from quizplay.models.values import CompositeValue

        game = _game([passage_question])
        await game.start_quiz()

        value = CompositeValue(
            value={
                "p1-a": {"type": "text", "value": "A"},
                "p1-b": {"type": "number", "value": 7},
            }
        )
        result = await game.submit_answer("p1", value)

        assert result.answer.score == pytest.approx(1.0)
        assert result.answer.max_score == 2.0
        assert result.answer.is_correct is False

    @pytest.mark.asyncio
    async def test_recursion_limit_reported(self, passage_question):
        """Verifica RecursionLimitExceeded como falha da operacao."""
        from quizplay.models.enums import ErrorCode
        from quizplay.models.values import CompositeValue

        game = _game([{**passage_question, "sub_questions": [passage_question]}], max_nesting_depth=1)
        await game.start_quiz()

        value = CompositeValue(value={"p1": {"type": "composite", "value": {}}})
        result = await game.submit_answer("p1", value)

        assert result.code == ErrorCode.RECURSION_LIMIT_EXCEEDED
        assert game.state.user_answers == {}


class TestQuizGameShuffle:
    """Testes para embaralhamento."""

    @pytest.mark.asyncio
    async def test_shuffle_before_start_is_permutation(self, make_question):
        """Verifica que embaralhar preserva o conjunto de questoes."""
        from quizplay.config import QuizConfig
        from quizplay.engine.quiz_game import QuizGame

        questions = [make_question(f"q{i}") for i in range(10)]
        game = QuizGame.from_questions(questions, config=QuizConfig(), rng=random.Random(7))

        result = await game.shuffle_questions()
        await game.start_quiz()

        seen = []
        for _ in range(10):
            seen.append((await game.get_current_question()).id)
            await game.next_question()

        assert result.success is True
        assert sorted(seen) == sorted(q["id"] for q in questions)

    @pytest.mark.asyncio
    async def test_shuffle_keeps_visited_and_answered(self, make_question):
        """Verifica que posicoes visitadas e respondidas nao mudam."""
        from quizplay.config import QuizConfig
        from quizplay.engine.quiz_game import QuizGame

        questions = [make_question(f"q{i}") for i in range(8)]
        game = QuizGame.from_questions(
            questions,
            config=QuizConfig(allow_out_of_order_submission=True),
            rng=random.Random(3),
        )
        await game.start_quiz()
        await game.submit_answer("q0", _text("B"))
        await game.next_question()
        await game.submit_answer("q6", _text("B"))

        await game.shuffle_questions()

        order = game.source.order()
        assert order[0] == 0
        assert order[1] == 1
        assert order[6] == 6
        assert sorted(order) == list(range(8))

    @pytest.mark.asyncio
    async def test_shuffle_rejected_when_paused_or_completed(self, sample_questions):
        """Verifica estados onde embaralhar e proibido."""
        from quizplay.models.enums import ErrorCode

        game = _game(sample_questions)
        await game.start_quiz()
        await game.pause_quiz()

        assert (await game.shuffle_questions()).code == ErrorCode.INVALID_STATE_TRANSITION

        await game.end_quiz()
        assert (await game.shuffle_questions()).code == ErrorCode.INVALID_STATE_TRANSITION


class TestQuizGameHints:
    """Testes para dicas e snapshot."""

    @pytest.mark.asyncio
    async def test_hint_for_question_and_sub_question(self, make_question, passage_question):
        """Verifica dica de questao de topo e de sub-questao."""
        game = _game([make_question("q1", hint="Pense em B"), passage_question])

        assert game.get_hint("q1") == "Pense em B"
        assert game.get_hint("p1-b") == {"en": "Add them", "pt": "Some"}
        assert game.get_hint("p1") is None
        assert game.get_hint("nope") is None

    @pytest.mark.asyncio
    async def test_snapshot(self, sample_questions):
        """Verifica snapshot serializavel."""
        game = _game(sample_questions)
        await game.start_quiz()
        await game.submit_answer("q1", _text("B"))

        data = game.snapshot()

        assert data["quiz_id"] == "test-123"
        assert data["status"] == "in_progress"
        assert data["total_questions"] == 3
        assert data["question_order"] == [0, 1, 2]
        assert data["summary"]["correct_answers"] == 1
        assert data["user_answers"]["q1"]["value"] == {"type": "text", "value": "B"}

    @pytest.mark.asyncio
    async def test_time_spent_is_measured(self, sample_questions):
        """Verifica time_spent automatico quando omitido."""
        game = _game(sample_questions)
        await game.start_quiz()

        result = await game.submit_answer("q1", _text("B"))

        assert result.answer.time_spent is not None
        assert result.answer.time_spent >= 0.0


class TestQuizGameCustomValidatorFailure:
    """Testes para validadores customizados que falham."""

    @pytest.mark.asyncio
    async def test_validator_raising_is_reported(self, make_question):
        """Verifica que excecao do validador vira ValidatorFailure."""
        from quizplay.models.enums import ErrorCode

        def broken(user_value, correct_value):
            raise RuntimeError("servico de correcao fora do ar")

        game = _game([{**make_question("q1"), "validator": broken}])
        await game.start_quiz()

        result = await game.submit_answer("q1", _text("B"))

        assert result.success is False
        assert result.code == ErrorCode.VALIDATOR_FAILURE
        assert result.details["error"] == "RuntimeError"
        assert game.state.user_answers == {}
        assert game.state.answer_history == []

    @pytest.mark.asyncio
    async def test_validator_unsupported_return_is_reported(self, make_question):
        """Verifica retorno nao suportado (string) do validador."""
        from quizplay.models.enums import ErrorCode

        game = _game([{**make_question("q1"), "validator": lambda user, correct: "yes"}])
        await game.start_quiz()

        result = await game.submit_answer("q1", _text("B"))

        assert result.code == ErrorCode.VALIDATOR_FAILURE
        assert result.details["error"] == "TypeError"
        assert game.calculate_score() == 0.0

    @pytest.mark.asyncio
    async def test_attempt_continues_after_failure(self, make_question):
        """Verifica que a tentativa segue utilizavel apos a falha."""
        from quizplay.models.enums import QuizStatus

        def broken(user_value, correct_value):
            raise ValueError("gabarito ilegivel")

        game = _game([{**make_question("q1"), "validator": broken}, make_question("q2")])
        await game.start_quiz()
        await game.submit_answer("q1", _text("B"))

        assert (await game.next_question()).success is True
        assert (await game.submit_answer("q2", _text("B"))).success is True
        assert game.status == QuizStatus.IN_PROGRESS
        assert game.calculate_score() == 1.0


class TestQuizGameConcurrency:
    """Testes para operacoes concorrentes na mesma tentativa."""

    @pytest.mark.asyncio
    async def test_concurrent_next_does_not_skip_questions(self, make_loader):
        """Verifica que avancos simultaneos sao serializados."""
        import asyncio

        from quizplay.config import QuizConfig
        from quizplay.engine.quiz_game import QuizGame
        from quizplay.models.enums import ErrorCode

        loader = make_loader(total=3, delay=0.01)
        game = QuizGame.from_loader(loader, config=QuizConfig(page_window_size=1))
        await game.start_quiz()

        results = await asyncio.gather(*(game.next_question() for _ in range(5)))

        assert sum(1 for r in results if r.success) == 2
        assert {r.code for r in results if not r.success} == {ErrorCode.NAVIGATION_BOUNDARY}
        assert game.state.current_question_index == 2
        assert len(loader.calls) == len(set(loader.calls))

    @pytest.mark.asyncio
    async def test_concurrent_submissions_apply_once_each(self, sample_questions):
        """Verifica que envios simultaneos nao duplicam o score."""
        import asyncio

        game = _game(sample_questions)
        await game.start_quiz()

        results = await asyncio.gather(
            game.submit_answer("q1", _text("B")),
            game.submit_answer("q1", _text("B")),
        )

        assert all(r.success for r in results)
        assert len(game.state.user_answers) == 1
        assert len(game.state.answer_history) == 2
        assert game.calculate_score() == 1.0
