"""
Insight Engine Tests
"""

import pytest

from cognitive_engine.errors import ValidationError
from cognitive_engine.insights import Insight, Outcome


class TestOutcome:
    def test_parse_valid(self):
        assert Outcome.parse("success") is Outcome.SUCCESS
        assert Outcome.parse("failure") is Outcome.FAILURE

    def test_parse_invalid_names_field(self):
        with pytest.raises(ValidationError) as exc:
            Outcome.parse("partial")
        assert exc.value.field == "outcome"


class TestInsight:
    def test_rate_rounds_half_up(self):
        insight = Insight(category="x", success_count=1, failure_count=7)
        assert insight.success_rate == 13

    def test_no_data(self):
        insight = Insight(category="x")
        assert insight.success_rate is None
        assert insight.summary == 'No learned data for "x"'

    @pytest.mark.parametrize("success,failure", [(0, 4), (4, 0), (2, 3), (1, 2)])
    def test_rate_is_bounded(self, success, failure):
        rate = Insight(category="x", success_count=success, failure_count=failure).success_rate
        assert 0 <= rate <= 100


class TestLearn:
    def test_message_previews_pattern(self, insights):
        result = insights.learn("coding", "use early return", "success")
        assert result == {"message": 'Learned: [success] coding - "use early return..."'}

    def test_long_pattern_is_stored_whole(self, insights):
        pattern = "p" * 80
        result = insights.learn("coding", pattern, "failure")

        assert f'"{"p" * 50}..."' in result["message"]
        assert insights.get_lessons("coding")["lessons"][0]["pattern"] == pattern

    def test_invalid_outcome_writes_nothing(self, insights):
        with pytest.raises(ValidationError) as exc:
            insights.learn("coding", "anything", "meh")

        assert exc.value.field == "outcome"
        assert insights.get_lessons("coding") == {"lessons": []}


class TestGetInsights:
    def test_success_rate_scenario(self, insights):
        for _ in range(3):
            insights.learn("coding", "use early return", "success")
        insights.learn("coding", "ignore errors", "failure")

        result = insights.get_insights("coding")

        assert result["doThis"] == ["use early return"]
        assert result["avoidThis"] == ["ignore errors"]
        assert "75%" in result["summary"]
        assert "(3 success, 1 failure)" in result["summary"]

    def test_repeated_pattern_counts(self, insights):
        for _ in range(4):
            insights.learn("math", "draw a diagram", "success")

        result = insights.get_insights("math")
        assert result["doThis"] == ["draw a diagram"]
        assert result["summary"] == '"math" success rate: 100% (4 success, 0 failure)'

    def test_patterns_ordered_by_frequency(self, insights):
        insights.learn("logic", "rare", "success")
        for _ in range(3):
            insights.learn("logic", "common", "success")

        assert insights.get_insights("logic")["doThis"] == ["common", "rare"]

    def test_rate_only_counts_returned_groups(self, insights):
        insights.learn("coding", "tests first", "success")
        insights.learn("coding", "tests first", "success")
        insights.learn("coding", "pair review", "success")
        insights.learn("coding", "skip review", "failure")

        result = insights.get_insights("coding", limit=1)

        assert result["doThis"] == ["tests first"]
        assert "67% (2 success, 1 failure)" in result["summary"]

    def test_category_substring(self, insights):
        insights.learn("coding-python", "type hints", "success")
        assert insights.get_insights("coding")["doThis"] == ["type hints"]

    def test_no_data(self, insights):
        result = insights.get_insights("unknown")
        assert result == {
            "doThis": [],
            "avoidThis": [],
            "summary": 'No learned data for "unknown"'
        }


class TestLessons:
    def test_listing_is_newest_first(self, insights):
        insights.learn("coding", "first", "success")
        insights.learn("coding", "second", "failure")

        lessons = insights.get_lessons("coding")["lessons"]
        assert [l["pattern"] for l in lessons] == ["second", "first"]
        assert lessons[0]["outcome"] == "failure"
        assert set(lessons[0]) == {"id", "category", "pattern", "outcome", "date"}

    def test_forget_by_id(self, insights):
        insights.learn("coding", "keep", "success")
        insights.learn("coding", "drop", "success")
        drop_id = insights.get_lessons("coding")["lessons"][0]["id"]

        assert insights.forget_lesson(id=drop_id) == {"deleted": 1, "message": "Deleted 1 lesson(s)"}
        assert [l["pattern"] for l in insights.get_lessons("coding")["lessons"]] == ["keep"]

    def test_forget_by_category(self, insights):
        insights.learn("coding", "a", "success")
        insights.learn("coding-js", "b", "failure")
        insights.learn("math", "c", "success")

        assert insights.forget_lesson(category="coding")["deleted"] == 2

    def test_forget_nothing(self, insights):
        assert insights.forget_lesson(id=42) == {"deleted": 0, "message": "No matching lessons found"}
        assert insights.forget_lesson()["deleted"] == 0

    def test_clear(self, insights):
        insights.learn("coding", "a", "success")
        assert insights.clear_lessons() == {"deleted": 1, "message": "Cleared all lessons (1 deleted)"}
        assert insights.clear_lessons()["deleted"] == 0
