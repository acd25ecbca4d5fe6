"""Crisis language detector.

Stateless and deterministic: scan() does no I/O and no logging, and is
safe to share across threads. A message is flagged when ANY rule in
CRISIS_RULES matches; callers that act on a match log it themselves.
"""
import logging
from typing import Iterable, List, Optional

from .config import CRISIS_RULES, CrisisRule, SafetyConfig

logger = logging.getLogger(__name__)


class CrisisDetector:
    """Flags possible self-harm or suicide risk language.

    The detector never fails: empty text, emoji-only text and very long
    text all simply return False when no rule matches.
    """

    def __init__(
        self,
        rules: Optional[Iterable[CrisisRule]] = None,
        config: Optional[SafetyConfig] = None,
    ):
        """Initialize detector.

        Args:
            rules: Rule set to evaluate (defaults to CRISIS_RULES)
            config: Safety configuration, used for version tagging
        """
        self.rules = tuple(rules) if rules is not None else CRISIS_RULES
        self.config = config or SafetyConfig()

        logger.info(
            "CRISIS_DETECTOR_INITIALIZED",
            extra={
                "rule_count": len(self.rules),
                "pattern_version": self.config.pattern_version,
            }
        )

    def scan(self, text: Optional[str]) -> bool:
        """Return True if the text contains crisis-risk language."""
        if not text:
            return False
        return any(rule.matches(text) for rule in self.rules)

    def matched_rules(self, text: Optional[str]) -> List[str]:
        """Names of every rule the text matches, in rule order.

        Used to explain an alert without repeating the message itself.
        """
        if not text:
            return []
        return [rule.name for rule in self.rules if rule.matches(text)]
