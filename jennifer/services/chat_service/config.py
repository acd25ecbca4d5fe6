"""Chat service configuration loaded from the environment."""
import os
from dataclasses import dataclass
from typing import Optional


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class ChatServiceConfig:
    """Configuration for the chat relay and its collaborators."""
    # HTTP
    port: int = 3000

    # LLM
    llm_provider: str = "openai"  # or "huggingface"
    model_name: str = "gpt-4o"
    model_endpoint: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = 1024
    temperature: float = 0.7
    timeout_seconds: int = 30

    # Conversation memory
    max_history_turns: int = 50
    alert_history_turns: int = 10
    session_ttl_seconds: Optional[float] = None  # None = keep for process lifetime

    # Crisis alerts
    alerts_enabled: bool = True
    alert_transport: str = "smtp"  # or "ses"
    alert_recipient: Optional[str] = None
    alert_sender: str = "alerts@therapist.app"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    aws_region: str = "us-east-1"

    # Logging
    pii_salt: str = "default_dev_salt_change_in_production_32chars"

    @classmethod
    def from_env(cls) -> "ChatServiceConfig":
        """Create configuration from environment variables."""
        ttl = os.getenv("SESSION_TTL_SECONDS")
        smtp_user = os.getenv("SMTP_USER")
        return cls(
            port=int(os.getenv("PORT", "3000")),
            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            model_name=os.getenv("LLM_MODEL_NAME", "gpt-4o"),
            model_endpoint=os.getenv("LLM_ENDPOINT"),
            api_key=os.getenv("OPENAI_API_KEY") or os.getenv("HUGGINGFACE_TOKEN"),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", "1024")),
            temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            timeout_seconds=int(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
            max_history_turns=int(os.getenv("MAX_HISTORY_TURNS", "50")),
            alert_history_turns=int(os.getenv("ALERT_HISTORY_TURNS", "10")),
            session_ttl_seconds=float(ttl) if ttl else None,
            alerts_enabled=_flag("CRISIS_ALERTS_ENABLED", "true"),
            alert_transport=os.getenv("ALERT_TRANSPORT", "smtp"),
            alert_recipient=os.getenv("ALERT_RECIPIENT"),
            alert_sender=os.getenv("ALERT_SENDER") or smtp_user or "alerts@therapist.app",
            smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_user=smtp_user,
            smtp_password=os.getenv("SMTP_PASS"),
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            pii_salt=os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars"),
        )
