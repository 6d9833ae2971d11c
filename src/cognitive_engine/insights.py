"""
Cognitive Engine Insight System

Lessons are category/pattern/outcome triples. Insights aggregate them per
category into the most frequent success and failure patterns plus a
success rate.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple

import structlog

from .errors import ValidationError
from .storage import StorageBackend, LessonRecord
from .validation import require_str, require_limit, optional_id

logger = structlog.get_logger(__name__)

PATTERN_PREVIEW_LENGTH = 50


class Outcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def parse(cls, value: Any) -> "Outcome":
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(o.value for o in cls)
            raise ValidationError(
                f"Invalid outcome {value!r}; expected one of: {allowed}",
                field="outcome"
            ) from None


@dataclass
class Insight:
    """Aggregated lessons for one category."""
    category: str
    do_this: List[str] = field(default_factory=list)
    avoid_this: List[str] = field(default_factory=list)
    success_count: int = 0
    failure_count: int = 0

    @property
    def success_rate(self) -> Optional[int]:
        """Whole percent, rounded half up; None when nothing was counted."""
        total = self.success_count + self.failure_count
        if total == 0:
            return None
        return int(math.floor(self.success_count * 100 / total + 0.5))

    @property
    def summary(self) -> str:
        rate = self.success_rate
        if rate is None:
            return f'No learned data for "{self.category}"'
        return (
            f'"{self.category}" success rate: {rate}% '
            f"({self.success_count} success, {self.failure_count} failure)"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "doThis": self.do_this,
            "avoidThis": self.avoid_this,
            "summary": self.summary
        }


def _lesson_to_dict(record: LessonRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "category": record.category,
        "pattern": record.pattern,
        "outcome": record.outcome,
        "date": record.created_at
    }


class InsightEngine:
    """
    Records lessons and aggregates them into insights.

    Success rates are computed over the pattern groups actually returned,
    i.e. at most ``limit`` distinct patterns per outcome. For categories
    with a long tail of rare patterns the rate is an approximation of the
    full population.
    """

    def __init__(self, storage: StorageBackend):
        self._storage = storage

    def learn(self, category: str, pattern: str, outcome: str) -> Dict[str, Any]:
        """Store one observed success or failure."""
        category = require_str(category, "category")
        pattern = require_str(pattern, "pattern")
        result = Outcome.parse(outcome)

        lesson_id = self._storage.insert_lesson(category, pattern, result.value)
        logger.info("lesson_learned", lesson_id=lesson_id, category=category, outcome=result.value)

        return {
            "message": f'Learned: [{result.value}] {category} - "{pattern[:PATTERN_PREVIEW_LENGTH]}..."'
        }

    def get_insights(self, category: str, limit: int = 5) -> Dict[str, Any]:
        category = require_str(category, "category")
        limit = require_limit(limit)

        successes = self._storage.count_lesson_patterns_by_outcome(
            category, Outcome.SUCCESS.value, limit
        )
        failures = self._storage.count_lesson_patterns_by_outcome(
            category, Outcome.FAILURE.value, limit
        )

        insight = Insight(
            category=category,
            do_this=[pattern for pattern, _ in successes],
            avoid_this=[pattern for pattern, _ in failures],
            success_count=_total(successes),
            failure_count=_total(failures)
        )
        return insight.to_dict()

    def get_lessons(self, category: str, limit: int = 10) -> Dict[str, Any]:
        """Raw lesson rows for a category, newest first."""
        category = require_str(category, "category")
        limit = require_limit(limit)
        records = self._storage.find_lessons_by_category_pattern(category, limit)
        return {"lessons": [_lesson_to_dict(r) for r in records]}

    def forget_lesson(self, id: Optional[int] = None, category: Optional[str] = None) -> Dict[str, Any]:
        lesson_id = optional_id(id)
        deleted = 0

        if lesson_id is not None:
            deleted = self._storage.delete_lesson_by_id(lesson_id)
        elif category:
            deleted = self._storage.delete_lessons_by_category_pattern(
                require_str(category, "category")
            )

        if deleted:
            logger.info("lessons_forgotten", deleted=deleted, lesson_id=lesson_id, category=category)

        return {
            "deleted": deleted,
            "message": f"Deleted {deleted} lesson(s)" if deleted > 0 else "No matching lessons found"
        }

    def clear_lessons(self) -> Dict[str, Any]:
        deleted = self._storage.delete_all_lessons()
        logger.info("lessons_cleared", deleted=deleted)
        return {
            "deleted": deleted,
            "message": f"Cleared all lessons ({deleted} deleted)"
        }


def _total(groups: List[Tuple[str, int]]) -> int:
    return sum(count for _, count in groups)
