"""
Cognitive Engine Stepwise Reasoner

Decomposes a problem statement into labeled reasoning steps whose number
grows with the requested depth (1-5), then derives a one-line conclusion
and a confidence level. Purely a function of its input: keywords come from
word frequency, not from any understanding of the text.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any

from .errors import ValidationError
from .validation import require_str

MIN_DEPTH = 1
MAX_DEPTH = 5
DEFAULT_DEPTH = 3
MAX_KEYWORDS = 5
PROBLEM_PREVIEW_LENGTH = 100

STOPWORDS = frozenset([
    # Korean particles
    "이", "가", "을", "를", "의", "에", "와", "과",
    # English
    "the", "a", "an", "is", "are", "be", "to", "of", "and", "in", "that", "it", "for",
])

_PUNCTUATION = re.compile(r"[^\w\s]")


class Confidence(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class ThinkResult:
    steps: List[str] = field(default_factory=list)
    conclusion: str = ""
    confidence: Confidence = Confidence.LOW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "steps": self.steps,
            "conclusion": self.conclusion,
            "confidence": self.confidence.value
        }


def extract_keywords(text: str, max_keywords: int = MAX_KEYWORDS) -> List[str]:
    """
    Most frequent non-stopword tokens longer than one character.

    Counter keeps first-seen order and most_common() sorts stably, so
    equal counts stay in order of first appearance.
    """
    words = _PUNCTUATION.sub(" ", text.lower()).split()
    counts = Counter(w for w in words if len(w) > 1 and w not in STOPWORDS)
    return [word for word, _ in counts.most_common(max_keywords)]


def _relations(keywords: List[str]) -> str:
    if len(keywords) < 2:
        return "Single concept"
    return f"Interaction between {keywords[0]} and {', '.join(keywords[1:])}"


def _hypothesis(keywords: List[str]) -> str:
    if not keywords:
        return "More information needed"
    return f'"{keywords[0]}" is likely the key factor'


def _validation(keywords: List[str]) -> str:
    if len(keywords) >= 3:
        return "Multiple factors confirmed -> a combined approach is needed"
    return "Simple structure -> can be solved directly"


def _conclusion(keywords: List[str], depth: int) -> str:
    if not keywords:
        return "Please define the problem more specifically."

    main = keywords[0]
    sub = ", ".join(keywords[1:3])

    if depth <= 2:
        return f'Core: approach centered on "{main}"'
    if depth <= 4:
        return f'Build the solution around "{main}", taking {sub or "related factors"} into account'
    return (
        f'Overall: centered on "{main}", linked with {sub or "secondary factors"}, '
        f"a multi-angle approach is recommended"
    )


def _confidence(depth: int, keyword_count: int) -> Confidence:
    score = depth * 2 + keyword_count
    if score >= 12:
        return Confidence.HIGH
    if score >= 7:
        return Confidence.MEDIUM
    return Confidence.LOW


def think(problem: str, depth: int = DEFAULT_DEPTH) -> Dict[str, Any]:
    """
    Break a problem into reasoning steps.

    Args:
        problem: Problem statement or question
        depth: 1 = problem and keywords, 2 adds relations, 3 a hypothesis,
            4 a validation note, 5 an alternative framing

    Returns:
        Dict with steps, conclusion and confidence
    """
    problem = require_str(problem, "problem")
    if isinstance(depth, bool) or not isinstance(depth, int) or not MIN_DEPTH <= depth <= MAX_DEPTH:
        raise ValidationError(
            f"'depth' must be an integer between {MIN_DEPTH} and {MAX_DEPTH}",
            field="depth"
        )

    result = ThinkResult()
    preview = problem[:PROBLEM_PREVIEW_LENGTH]
    if len(problem) > PROBLEM_PREVIEW_LENGTH:
        preview += "..."
    result.steps.append(f'[Analysis] Problem: "{preview}"')

    keywords = extract_keywords(problem)
    result.steps.append(f"[Key elements] {', '.join(keywords)}")

    if depth >= 2:
        result.steps.append(f"[Relations] {_relations(keywords)}")
    if depth >= 3:
        result.steps.append(f"[Hypothesis] {_hypothesis(keywords)}")
    if depth >= 4:
        result.steps.append(f"[Validation] {_validation(keywords)}")
    if depth >= 5:
        result.steps.append("[Alternatives] Re-examine from a different perspective")

    result.conclusion = _conclusion(keywords, depth)
    result.confidence = _confidence(depth, len(keywords))
    return result.to_dict()
