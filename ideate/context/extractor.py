"""Keyword and regex signal extraction from a single chat message."""

import re

from ideate.context.models import CompanySize, Insights, Urgency
from ideate.knowledge.catalog import GOAL_KEYWORDS, INDUSTRY_USE_CASES, PAIN_POINT_SOLUTIONS

# Checked in order; the first pattern that matches decides.
_COMPANY_SIZE_PATTERNS: list[tuple[CompanySize, re.Pattern[str]]] = [
    ("small", re.compile(r"\b(?:startup|small business|solo|freelance|1-10)(?!\w)")),
    ("medium", re.compile(r"\b(?:medium|mid-size|growing|11-100|11-50)(?!\w)")),
    ("enterprise", re.compile(r"\b(?:enterprise|large|corporation|500\+|1000\+)(?!\w)")),
]

# "5-person shop", "8 person team". Needed so "a 5-person retail shop" reads as small;
# the keyword patterns above never match a headcount.
_HEADCOUNT = re.compile(r"\b(\d+)[\s-]?(?:person|people|employees?|staff)\b")
_SMALL_HEADCOUNT_MAX = 10

_URGENCY_PATTERNS: list[tuple[Urgency, re.Pattern[str]]] = [
    ("high", re.compile(r"\b(?:urgent|asap|immediately|this week|right away)\b")),
    ("medium", re.compile(r"\b(?:this month|soon|quickly)\b")),
]

_GOAL_PATTERNS: dict[str, re.Pattern[str]] = {
    keyword: re.compile(rf"[^.]*{keyword}[^.]*\.?", re.IGNORECASE) for keyword in GOAL_KEYWORDS
}


def _classify_company_size(lower: str) -> CompanySize | None:
    for size, pattern in _COMPANY_SIZE_PATTERNS:
        if pattern.search(lower):
            return size
    match = _HEADCOUNT.search(lower)
    if match and 0 < int(match.group(1)) <= _SMALL_HEADCOUNT_MAX:
        return "small"
    return None


def _classify_urgency(lower: str) -> Urgency | None:
    for urgency, pattern in _URGENCY_PATTERNS:
        if pattern.search(lower):
            return urgency
    return None


def _extract_goals(message: str, lower: str) -> list[str]:
    goals: list[str] = []
    for keyword, pattern in _GOAL_PATTERNS.items():
        if keyword not in lower:
            continue
        goals.extend(
            fragment.strip() for fragment in pattern.findall(message) if fragment.strip()
        )
    return goals


def extract_insights(message: str) -> Insights:
    """Scan one message for industry, pain point, size, urgency and goal signals.

    Matching is case-insensitive substring containment against fixed
    vocabularies, so results follow vocabulary order rather than position
    in the text. Never raises; no match yields empty fields.
    """
    lower = message.lower()

    return Insights(
        mentioned_industries=[industry for industry in INDUSTRY_USE_CASES if industry in lower],
        mentioned_pain_points=[
            s.pain_point for s in PAIN_POINT_SOLUTIONS if s.pain_point.lower() in lower
        ],
        mentioned_goals=_extract_goals(message, lower),
        company_size=_classify_company_size(lower),
        urgency=_classify_urgency(lower),
    )
