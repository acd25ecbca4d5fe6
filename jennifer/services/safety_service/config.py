"""Crisis detection rules and safety service configuration.

The rule set is a heuristic safety net, not a clinical classifier. A
missed crisis signal costs more than a spurious alert, so the rules are
deliberately broad and overlap one another. Precision is a known
limitation: "end my shift" matches end_life_intent, for example.
"""
import re
from dataclasses import dataclass
from typing import Tuple

# Accepts the ASCII and typographic apostrophe, or none at all.
_APOS = "['’]?"


@dataclass(frozen=True)
class CrisisRule:
    """A named, word-boundary-anchored phrase-family matcher."""
    name: str
    pattern: re.Pattern

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(name: str, body: str) -> CrisisRule:
    return CrisisRule(name=name, pattern=re.compile(rf"\b({body})\b", re.IGNORECASE))


# Order only affects how soon scan() short-circuits, never its result.
CRISIS_RULES: Tuple[CrisisRule, ...] = (
    _rule(
        "direct_self_harm",
        r"kill(ing)?\s*(my)?self|suicide|suicidal",
    ),
    _rule(
        "wish_to_die",
        rf"want(ing)?\s*to\s*die|don{_APOS}t\s*want\s*to\s*live",
    ),
    _rule(
        "end_life_intent",
        r"end(ing)?\s*(my|it\s*all)|end\s*my\s*life",
    ),
    _rule(
        "self_injury",
        r"self[- ]?harm|cut(ting)?\s*(my)?self|hurt(ing)?\s*(my)?self",
    ),
    _rule(
        "no_point_living",
        r"no\s*(point|reason)\s*(in\s*)?(living|life|going\s*on)",
    ),
    _rule(
        "better_off_dead",
        r"better\s*off\s*(dead|without\s*me)",
    ),
    _rule(
        "explicit_plan",
        r"plan(ning)?\s*to\s*(kill|hurt|end)",
    ),
)


@dataclass(frozen=True)
class SafetyConfig:
    """Configuration for crisis detection and alerting."""

    # Version tracking so alerts can be traced to a rule revision
    pattern_version: str = "2025.06.01"
