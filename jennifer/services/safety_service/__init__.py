"""Safety Service: crisis-language detection and alerting.

Every inbound chat message is scanned. A match does not change the chat
flow; it only raises an email alert to a human reviewer, carrying the
message, Jennifer's reply and recent context.

Components:
- config.py: CRISIS_RULES phrase families and SafetyConfig
- detector.py: CrisisDetector, a pure text -> bool scan
- alert_publisher.py: CrisisAlert, email publisher and fire-and-forget dispatcher

Usage:
    from jennifer.services.safety_service import CrisisDetector
    detector = CrisisDetector()
    detector.scan("I don't want to live anymore")  # True
"""

from .config import CRISIS_RULES, CrisisRule, SafetyConfig
from .detector import CrisisDetector
from .alert_publisher import CrisisAlert, CrisisAlertDispatcher, CrisisAlertPublisher

__all__ = [
    "CRISIS_RULES",
    "CrisisRule",
    "SafetyConfig",
    "CrisisDetector",
    "CrisisAlert",
    "CrisisAlertDispatcher",
    "CrisisAlertPublisher",
]
