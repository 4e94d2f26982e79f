"""Conversation staging and system prompt assembly."""

import logging
from pathlib import Path

from ideate.config import settings
from ideate.context.models import ConversationContext
from ideate.knowledge.catalog import (
    GENERIC_USE_CASES,
    INDUSTRY_USE_CASES,
    PAIN_POINT_SOLUTIONS,
    PainPointSolution,
    UseCase,
)

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"

STAGES = ("discovery", "exploration", "solutioning", "closing")

STAGE_FOCUS: dict[str, str] = {
    "discovery": (
        "Understand their business: what industry they are in, what they do, "
        "and the challenges they face."
    ),
    "exploration": (
        "Deepen your understanding of their pain points: how often they happen, "
        "who is affected, and what they cost."
    ),
    "solutioning": (
        "Recommend concrete AI solutions for the pain points you have identified "
        "and explain how each would work for them."
    ),
    "closing": (
        "Summarize what you have discussed and the solutions proposed, and gauge "
        "whether they are ready to talk to the team."
    ),
}

MAX_USE_CASES = 3
MAX_SOLUTIONS = 3
MAX_QUESTIONS = 2

GENERIC_QUESTIONS = [
    "What would success look like for you six months from now?",
    "Which part of your week feels the most repetitive?",
    "Where do you think AI could make the biggest difference for you?",
]

_DEFAULT_PERSONA = (
    "You are a friendly AI consultant for {company_name}, an AI consulting firm. "
    "Be consultative and conversational, never interrogative: ask at most one "
    "question per reply and offer concrete ideas. Keep replies under 150 words."
)


def _read_config(filename: str) -> str:
    """Read a config markdown file, returning empty string if missing."""
    path = CONFIG_DIR / filename
    if path.exists():
        return path.read_text(encoding="utf-8")
    return ""


def _persona() -> str:
    template = _read_config("PERSONA.md") or _DEFAULT_PERSONA
    return template.replace("{company_name}", settings.company_name)


# -- Stage -------------------------------------------------------------------


def get_conversation_stage(turn_count: int) -> str:
    """Map the number of user turns so far to a conversation stage."""
    if turn_count < 3:
        return "discovery"
    if turn_count < 6:
        return "exploration"
    if turn_count < 10:
        return "solutioning"
    return "closing"


# -- Knowledge selection -----------------------------------------------------


def select_use_cases(industry: str | None) -> list[UseCase]:
    """Industry use cases, or generic ones when the industry has no entry."""
    use_cases = INDUSTRY_USE_CASES.get(industry.lower(), []) if industry else []
    if not use_cases:
        use_cases = GENERIC_USE_CASES
    return use_cases[:MAX_USE_CASES]


def match_pain_point_solutions(pain_points: list[str]) -> list[PainPointSolution]:
    """Solutions whose pain point overlaps (by substring) an accumulated one."""
    lowered = [p.lower() for p in pain_points]
    matches = [
        s
        for s in PAIN_POINT_SOLUTIONS
        if any(s.pain_point.lower() in p or p in s.pain_point.lower() for p in lowered if p)
    ]
    return matches[:MAX_SOLUTIONS]


def identify_knowledge_gaps(context: ConversationContext) -> list[str]:
    gaps = []
    if not context.industry:
        gaps.append("industry")
    if not context.company_size:
        gaps.append("company_size")
    if not context.pain_points:
        gaps.append("pain_points")
    if not context.budget_range:
        gaps.append("budget")
    if not context.timeline:
        gaps.append("timeline")
    return gaps


def generate_suggested_questions(context: ConversationContext, stage: str) -> list[str]:
    """Pick the next two questions worth steering toward."""
    candidates: list[str] = []

    if stage == "discovery":
        if not context.industry:
            candidates.append("What industry is your business in?")
        if not context.pain_points:
            candidates.append("What's the biggest challenge you're facing right now?")
        if not context.company_size:
            candidates.append("How many people are on your team?")
    else:
        candidates.extend(s.question for s in match_pain_point_solutions(context.pain_points))
        if context.pain_points and not context.current_tools:
            candidates.append("What tools or software are you currently using to handle this?")
        if not context.budget_range:
            candidates.append("Do you have a budget range in mind for this project?")
        if not context.timeline:
            candidates.append("What's your ideal timeline for implementing a solution?")

    candidates.extend(GENERIC_QUESTIONS)

    questions: list[str] = []
    for q in candidates:
        if q not in questions:
            questions.append(q)
        if len(questions) == MAX_QUESTIONS:
            break
    return questions


# -- Rendering ---------------------------------------------------------------


def _format_context(context: ConversationContext) -> str:
    fields = [
        ("Industry", context.industry),
        ("Company size", context.company_size),
        ("Pain points", ", ".join(context.pain_points)),
        ("Goals", "; ".join(context.goals)),
        ("Current tools", ", ".join(context.current_tools)),
        ("Budget", context.budget_range),
        ("Timeline", context.timeline),
    ]
    lines = [f"- {label}: {value}" for label, value in fields if value]
    if not lines:
        return "# What You Know So Far\n\nNothing yet. This is a fresh conversation."
    return "# What You Know So Far\n\n" + "\n".join(lines)


def _format_use_cases(use_cases: list[UseCase]) -> str:
    lines = [f"- {u.use_case} ({u.benefit})" for u in use_cases]
    return "# Relevant AI Use Cases\n\n" + "\n".join(lines)


def _format_solutions(solutions: list[PainPointSolution]) -> str:
    lines = [f"- {s.pain_point} → {s.ai_solution} ({s.impact})" for s in solutions]
    return "# Pain Point Solutions\n\n" + "\n".join(lines)


def _format_stage(stage: str) -> str:
    return f"# Conversation Stage: {stage}\n\nFocus: {STAGE_FOCUS[stage]}"


def _format_questions(questions: list[str]) -> str:
    lines = [f"- {q}" for q in questions]
    return (
        "# Suggested Next Questions\n\n"
        "Weave at most one of these in naturally if it fits:\n" + "\n".join(lines)
    )


_SUGGESTIONS_INSTRUCTION = (
    "# Suggestion Chips\n\n"
    "End every reply with exactly one line in this form, listing 2-3 short "
    "replies the user might click (under 6 words each):\n"
    "[SUGGESTIONS: option1 | option2 | option3]"
)

_HANDOFF_CRITERIA = (
    "# When To Offer A Human Handoff\n\n"
    "Offer to connect them with the team for a detailed proposal and pricing "
    "ONLY when ALL of these are true:\n"
    "- You understand their industry or type of business.\n"
    "- At least one concrete pain point has been identified.\n"
    "- You have described at least one concrete AI solution approach.\n"
    "- They have expressed interest in exploring it further.\n\n"
    "Do NOT offer during early discovery or before you have suggested a solution.\n"
    "When you do offer, say something like: \"Would you like me to connect you "
    "with our team to get a detailed proposal and pricing for this solution?\""
)


def build_system_prompt(
    context: ConversationContext,
    stage: str,
    research_digest: str | None = None,
) -> str:
    """Assemble the instruction text sent ahead of the conversation history.

    Sections appear in a fixed order: persona, known context, use cases,
    pain-point solutions (when any match), stage focus, research (when
    given), suggested questions, chip directive, handoff criteria.
    """
    sections = [
        _persona().strip(),
        _format_context(context),
        _format_use_cases(select_use_cases(context.industry)),
    ]

    solutions = match_pain_point_solutions(context.pain_points)
    if solutions:
        sections.append(_format_solutions(solutions))

    sections.append(_format_stage(stage))

    if research_digest:
        sections.append(f"# Research\n\n{research_digest}")

    sections.append(_format_questions(generate_suggested_questions(context, stage)))
    sections.append(_SUGGESTIONS_INSTRUCTION)
    sections.append(_HANDOFF_CRITERIA)

    return "\n\n---\n\n".join(sections)
