"""Jennifer White: a conversational relay with crisis-language alerting."""

__version__ = "1.0.0"
