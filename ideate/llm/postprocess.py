"""Reply post-processing: suggestion chips and handoff-offer detection."""

import re
from dataclasses import dataclass, field

_SUGGESTIONS_DIRECTIVE = re.compile(r"\[SUGGESTIONS:([^\]]*)\]")


@dataclass
class ParsedReply:
    content: str
    suggestions: list[str] = field(default_factory=list)


def parse_suggestions(reply: str) -> ParsedReply:
    """Split a ``[SUGGESTIONS: a | b | c]`` directive off the reply.

    The tag is case-sensitive. Without it the reply is returned unchanged
    with no chips.
    """
    match = _SUGGESTIONS_DIRECTIVE.search(reply)
    if not match:
        return ParsedReply(content=reply)

    options = [opt.strip() for opt in match.group(1).split("|")]
    content = (reply[: match.start()] + reply[match.end() :]).strip()
    return ParsedReply(content=content, suggestions=[opt for opt in options if opt])


def is_handoff_offer(reply: str) -> bool:
    """Heuristic: does the reply offer to hand the user to the team?

    Plain phrase matching, so coincidental wording can trip it.
    """
    lower = reply.lower()
    return "connect you with our team" in lower or (
        "proposal" in lower and "would you like" in lower
    )
