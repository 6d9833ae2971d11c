"""
Cognitive Engine Answer Verifier

Rule-based scoring of a candidate answer. Scoring starts at 100 and each
rule that fires subtracts a fixed penalty:

- too short (< 10 characters): -20
- each contradiction pattern found: -10
- three or more distinct uncertainty phrases: -15
- less than 10% of context words echoed in the answer: -25
- each failed custom criterion: -15

The score is clamped at 0 and the answer is valid only when no rule fired.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple

from .validation import require_str, string_list

MIN_ANSWER_LENGTH = 10
RELEVANCE_THRESHOLD = 0.1
HIGH_UNCERTAINTY_COUNT = 3

SHORT_PENALTY = 20
CONTRADICTION_PENALTY = 10
UNCERTAINTY_PENALTY = 15
RELEVANCE_PENALTY = 25
CRITERION_PENALTY = 15

CONTRADICTION_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"하지만.*그러나"), "Redundant contrastive conjunctions"),
    (re.compile(r"항상.*절대"), "Excessive absolute expressions"),
    (re.compile(r"모든.*아무"), "Potentially contradictory expressions"),
    (re.compile(r"\bbut\b.*\bhowever\b", re.IGNORECASE), "Redundant contrastive conjunctions"),
    (re.compile(r"\balways\b.*\bnever\b", re.IGNORECASE), "Excessive absolute expressions"),
]

UNCERTAINTY_PHRASES = [
    "아마", "아마도", "어쩌면", "같아요", "것 같",
    "maybe", "perhaps", "probably", "might", "could be",
]

_INCLUDE_KEYWORDS = ("include", "포함")
_LENGTH_KEYWORDS = ("char", "자")
_INCLUDE_TARGET = re.compile(r"(?:include[sd]?|포함)\s+(.+)", re.IGNORECASE)
_NUMBER = re.compile(r"(\d+)")


@dataclass
class VerifyResult:
    valid: bool = True
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    score: int = 100

    def penalize(self, issue: str, points: int, suggestion: Optional[str] = None) -> None:
        self.issues.append(issue)
        if suggestion:
            self.suggestions.append(suggestion)
        self.score -= points

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "issues": self.issues,
            "suggestions": self.suggestions,
            "score": self.score
        }


def find_contradictions(text: str) -> List[str]:
    return [issue for pattern, issue in CONTRADICTION_PATTERNS if pattern.search(text)]


def count_uncertainty(text: str) -> int:
    """Number of distinct uncertainty phrases present in the text."""
    lowered = text.lower()
    return sum(1 for phrase in UNCERTAINTY_PHRASES if phrase in lowered)


def relevance_ratio(answer: str, context: str) -> float:
    """
    Fraction of context words (longer than 2 chars) found inside some
    answer token. A context without such words scores 0.
    """
    context_words = [w for w in context.lower().split() if len(w) > 2]
    if not context_words:
        return 0.0
    answer_words = answer.lower().split()
    overlap = [w for w in context_words if any(w in aw for aw in answer_words)]
    return len(overlap) / len(context_words)


def _include_target(criterion: str) -> str:
    if ":" in criterion:
        return criterion.split(":", 1)[1].strip()
    match = _INCLUDE_TARGET.search(criterion)
    return match.group(1).strip() if match else ""


def check_criterion(answer: str, criterion: str) -> Optional[str]:
    """
    Check one custom criterion.

    Recognizes "must include X" (or "include: X") and "minimum N characters".
    Returns a suggestion when the criterion fails, None when it passes.
    Unrecognized phrasings always pass.
    """
    lowered = criterion.lower()

    if any(k in lowered for k in _INCLUDE_KEYWORDS):
        keyword = _include_target(criterion)
        if keyword and keyword.lower() not in answer.lower():
            return f'Include "{keyword}"'

    if any(k in lowered for k in _LENGTH_KEYWORDS):
        match = _NUMBER.search(criterion)
        if match:
            min_length = int(match.group(1))
            if len(answer) < min_length:
                return f"At least {min_length} characters required"

    return None


def verify(answer: str, criteria: Optional[List[str]] = None, context: str = "") -> Dict[str, Any]:
    """
    Score an answer for consistency, certainty and relevance.

    Args:
        answer: Answer text to check
        criteria: Extra checks such as "must include X" or "minimum 50 characters"
        context: Original question or context the answer should address
    """
    answer = require_str(answer, "answer")
    criteria = string_list(criteria, "criteria")
    context = require_str(context or "", "context")

    if not answer.strip():
        return VerifyResult(
            valid=False,
            issues=["Answer is empty"],
            suggestions=["Provide a concrete answer"],
            score=0
        ).to_dict()

    result = VerifyResult()

    if len(answer) < MIN_ANSWER_LENGTH:
        result.penalize("Answer is too short", SHORT_PENALTY, "Add a more detailed explanation")

    for issue in find_contradictions(answer):
        result.penalize(issue, CONTRADICTION_PENALTY)

    if count_uncertainty(answer) >= HIGH_UNCERTAINTY_COUNT:
        result.penalize(
            "Too many uncertain expressions", UNCERTAINTY_PENALTY,
            "Back the answer with firmer evidence"
        )

    if context and relevance_ratio(answer, context) < RELEVANCE_THRESHOLD:
        result.penalize(
            "Weak relevance to the context", RELEVANCE_PENALTY,
            "Answer using the key terms of the original question"
        )

    for criterion in criteria:
        suggestion = check_criterion(answer, criterion)
        if suggestion:
            result.penalize(f"Criterion not met: {criterion}", CRITERION_PENALTY, suggestion)

    result.score = max(0, result.score)
    result.valid = not result.issues
    if not result.suggestions:
        result.suggestions = ["Verification passed"]
    return result.to_dict()
