"""
Unit tests for the distractor generator.

Run: pytest tests/unit/test_distractors.py -v
"""

import pytest

from quizlo.core.models import Question
from quizlo.core.shuffle import Shuffler
from quizlo.quiz.distractors import DistractorGenerator, is_numeric


def q(qid, answer, options=()):
    return Question(id=qid, question=f"Q{qid}?", answer=answer, options=tuple(options))


class TestExplicitOptions:
    """Questions that ship their own options are never generated."""

    def test_returns_same_option_set(self, anatomy_bank):
        question = q(99, "Femur", ["Tibia", "Femur", "Fibula", "Ulna"])
        generator = DistractorGenerator(Shuffler(seed=3))

        options = generator.generate(question, anatomy_bank + [question])

        assert sorted(options) == sorted(question.options)
        assert "Femur" in options

    @pytest.mark.parametrize("seed", range(5))
    def test_always_contains_answer(self, seed):
        question = q(1, "True", ["True", "False"])
        options = DistractorGenerator(Shuffler(seed=seed)).generate(question, [question])
        assert set(options) == {"True", "False"}


class TestGeneratedOptions:
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_four_distinct_options_with_answer_once(self, anatomy_bank, seed):
        generator = DistractorGenerator(Shuffler(seed=seed))

        for question in anatomy_bank:
            options = generator.generate(question, anatomy_bank)
            assert len(options) == 4
            assert len(set(options)) == 4
            assert options.count(question.correct) == 1

    def test_neighbours_in_source_order(self, anatomy_bank, shuffler):
        """With no reordering, the nearest plausible answers are picked first."""
        options = DistractorGenerator(shuffler).generate(anatomy_bank[0], anatomy_bank)
        assert options == ["Femur", "Humerus", "Patella", "Skull"]

    def test_distractors_come_from_window(self, bank_factory):
        bank = bank_factory(60)
        target = bank[30]
        window = {x.answer for x in bank[10:51]}
        generator = DistractorGenerator(Shuffler(seed=11), radius=20)

        for _ in range(20):
            options = generator.generate(target, bank)
            assert set(options) - {target.answer} <= window

    def test_answer_is_trimmed(self, anatomy_bank, shuffler):
        padded = Question(id=1, question="Which bone protects the brain?", answer="  Skull \n")
        bank = [padded] + anatomy_bank[1:]

        options = DistractorGenerator(shuffler).generate(padded, bank)

        assert "Skull" in options
        assert "  Skull \n" not in options


class TestQualityFilters:
    @pytest.fixture
    def noisy_bank(self):
        return [
            q(1, "Mitochondria"),
            q(2, "42"),
            q(3, "3,14"),
            q(4, "ok"),
            q(5, "See page 12"),
            q(6, "Ribosome"),
            q(7, "Nucleus"),
            q(8, "Lysosome"),
        ]

    def test_noise_excluded_from_neighbourhood(self, noisy_bank, shuffler):
        options = DistractorGenerator(shuffler, radius=10).generate(noisy_bank[0], noisy_bank)
        assert options == ["Ribosome", "Nucleus", "Lysosome", "Mitochondria"]

    def test_stop_tokens_are_case_insensitive(self, shuffler):
        bank = [
            q(1, "Axon"),
            q(2, "chapter two recap"),
            q(3, "Lezione 4"),
            q(4, "Dendrite"),
            q(5, "Synapse"),
            q(6, "Myelin"),
        ]
        options = DistractorGenerator(shuffler).generate(bank[0], bank)
        assert options == ["Dendrite", "Synapse", "Myelin", "Axon"]
        assert "chapter two recap" not in options
        assert "Lezione 4" not in options

    def test_top_up_uses_whole_bank(self, noisy_bank, shuffler):
        """Outside the window only correctness, length and duplicates are checked."""
        generator = DistractorGenerator(shuffler, radius=4)

        options = generator.generate(noisy_bank[0], noisy_bank)

        assert options == ["3,14", "See page 12", "Ribosome", "Mitochondria"]

    def test_duplicates_removed(self, shuffler):
        bank = [q(1, "Alpha"), q(2, "Beta"), q(3, "Beta"), q(4, " Beta "), q(5, "Gamma")]
        options = DistractorGenerator(shuffler).generate(bank[0], bank)
        assert options == ["Beta", "Gamma", "Alpha"]

    def test_same_answer_elsewhere_is_not_a_distractor(self, shuffler):
        bank = [q(1, "Alpha"), q(2, "Alpha"), q(3, "Beta")]
        options = DistractorGenerator(shuffler).generate(bank[0], bank)
        assert options.count("Alpha") == 1


class TestSmallBanks:
    def test_single_question_bank(self, shuffler):
        only = q(1, "Lonely")
        assert DistractorGenerator(shuffler).generate(only, [only]) == ["Lonely"]

    def test_fewer_than_three_distractors(self, shuffler):
        bank = [q(1, "Alpha"), q(2, "Beta")]
        assert DistractorGenerator(shuffler).generate(bank[0], bank) == ["Beta", "Alpha"]


class TestUnknownQuestion:
    def test_random_fallback_when_not_in_bank(self, anatomy_bank, shuffler):
        stranger = q(999, "Hyoid")
        options = DistractorGenerator(shuffler).generate(stranger, anatomy_bank)
        assert options == ["Skull", "Femur", "Humerus", "Hyoid"]

    def test_fallback_never_repeats_answer(self, shuffler):
        bank = [q(1, "Alpha"), q(2, " Alpha "), q(3, "Beta"), q(4, "Beta")]
        stranger = q(99, "Alpha")

        options = DistractorGenerator(shuffler).generate(stranger, bank)

        assert options == ["Beta", "Alpha"]


class TestIsNumeric:
    @pytest.mark.parametrize("text", ["7", "2024", "3.14", "0,5"])
    def test_numbers(self, text):
        assert is_numeric(text)

    @pytest.mark.parametrize("text", ["7th", "v2.0", "-3", "1/2", "three"])
    def test_not_numbers(self, text):
        assert not is_numeric(text)
