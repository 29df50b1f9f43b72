"""
Tests for answer evaluation.
"""

import pytest

from interviewiq.assessments.interview.answer_evaluation import AnswerEvaluator, MatchPolicy, normalize_answer
from interviewiq.domain.questions import Question

HTML = Question(1, "Web Development", "fresher", "What does HTML stand for?", "HyperText Markup Language")


class TestNormalizeAnswer:
    def test_trims_lowercases_and_collapses_whitespace(self):
        assert normalize_answer("  HyperText   Markup\tLanguage ") == "hypertext markup language"

    def test_none_and_empty(self):
        assert normalize_answer(None) == ""
        assert normalize_answer("   ") == ""


class TestExactPolicy:
    def setup_method(self):
        self.evaluator = AnswerEvaluator()

    def test_default_policy_is_exact(self):
        assert self.evaluator.policy == MatchPolicy.EXACT

    def test_case_and_whitespace_insensitive(self):
        result = self.evaluator.evaluate("hypertext  markup language ", HTML.correct_answer, HTML)
        assert result.is_correct
        assert result.points == 10

    def test_wrong_answer_scores_zero(self):
        result = self.evaluator.evaluate("Hyperlink Text", HTML.correct_answer, HTML)
        assert not result.is_correct
        assert result.points == 0

    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_blank_is_never_correct(self, blank):
        assert not self.evaluator.evaluate(blank, HTML.correct_answer, HTML).is_correct

    def test_missing_reference_is_never_correct(self):
        assert not self.evaluator.evaluate("anything", None, HTML).is_correct
        assert not self.evaluator.evaluate("", "", HTML).is_correct

    def test_points_follow_question(self):
        question = Question(7, "DevOps", "fresher", "Q?", "docker", points=25)
        assert self.evaluator.evaluate("Docker", "docker", question).points == 25


class TestContainsPolicy:
    def test_accepts_answer_containing_reference(self):
        evaluator = AnswerEvaluator("contains")
        assert evaluator.matches("It is HyperText Markup Language.", HTML.correct_answer)
        assert not evaluator.matches("HyperText", HTML.correct_answer)


class TestKeywordsPolicy:
    def test_threshold_share_of_keywords(self):
        evaluator = AnswerEvaluator(MatchPolicy.KEYWORDS, keyword_threshold=0.6)
        assert evaluator.matches("markup language of hypertext", HTML.correct_answer)
        assert evaluator.matches("hypertext markup", HTML.correct_answer)
        assert not evaluator.matches("markup", HTML.correct_answer)

    def test_reference_of_stop_words_falls_back_to_equality(self):
        evaluator = AnswerEvaluator(MatchPolicy.KEYWORDS)
        assert evaluator.matches("A", "a")
        assert not evaluator.matches("an", "a")

    def test_rejects_invalid_threshold(self):
        with pytest.raises(ValueError):
            AnswerEvaluator(MatchPolicy.KEYWORDS, keyword_threshold=1.5)


class TestBuildAnswer:
    def test_builds_scored_answer(self):
        answer = AnswerEvaluator().build_answer(HTML, "HyperText Markup Language", 12)

        assert answer.question_id == 1
        assert answer.is_correct
        assert answer.points == 10
        assert answer.time_spent == 12

    def test_none_text_is_stored_as_empty(self):
        answer = AnswerEvaluator().build_answer(HTML, None, 0)

        assert answer.user_answer == ""
        assert not answer.is_correct

    def test_negative_time_is_rejected(self):
        with pytest.raises(ValueError):
            AnswerEvaluator().build_answer(HTML, "x", -1)
