"""Chat relay - orchestrates one conversational exchange.

Flow per message:
    store.append(user turn) -> detector.scan -> llm.generate(history)
    -> store.append(assistant turn) -> [crisis] dispatcher.dispatch(alert)

The relay owns every failure path of the exchange: a model failure
becomes FALLBACK_MESSAGE and alert delivery never blocks the reply.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from jennifer.shared.models import Turn
from jennifer.shared.utils import hash_pii
from ..conversation_service import ConversationStore
from ..llm_service import SYSTEM_PROMPT, BaseLLM
from ..safety_service import CrisisAlert, CrisisAlertDispatcher, CrisisDetector

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = (
    "I'm so sorry, I'm having trouble responding right now. "
    "Please try again in a moment."
)


@dataclass(frozen=True)
class ChatReply:
    """Outcome of one exchange as returned to the client."""
    message: str
    is_crisis: bool
    fallback: bool = False

    def to_dict(self) -> dict:
        return {"message": self.message, "isCrisis": self.is_crisis}


class ChatRelay:
    """Relays user messages to the model with per-session memory.

    All collaborators are injected; the relay holds no global state.
    """

    def __init__(
        self,
        store: ConversationStore,
        detector: CrisisDetector,
        llm: Optional[BaseLLM],
        alert_dispatcher: Optional[CrisisAlertDispatcher] = None,
        alert_history_turns: int = 10,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        """Initialize relay.

        Args:
            store: Conversation memory
            detector: Crisis language detector
            llm: Model client; None means every reply is the fallback
            alert_dispatcher: Crisis alert side channel; None disables alerts
            alert_history_turns: Turns of context included in an alert
            system_prompt: Persona instruction sent with each call
        """
        self.store = store
        self.detector = detector
        self.llm = llm
        self.alert_dispatcher = alert_dispatcher
        self.alert_history_turns = alert_history_turns
        self.system_prompt = system_prompt

        logger.info(
            "CHAT_RELAY_INITIALIZED",
            extra={
                "llm_available": llm is not None,
                "alerts_enabled": alert_dispatcher is not None,
            }
        )

    @property
    def ready(self) -> bool:
        return self.llm is not None

    async def handle_message(self, session_id: str, message: str) -> ChatReply:
        """Process one user message and return Jennifer's reply.

        Args:
            session_id: Non-empty client session key
            message: Non-empty user message

        Returns:
            ChatReply; never raises for model or alert failures
        """
        session_id_hash = hash_pii(session_id)

        self.store.append(session_id, Turn.user(message))
        is_crisis = self.detector.scan(message)

        logger.info(
            "CHAT_MESSAGE_RECEIVED",
            extra={
                "session_id_hash": session_id_hash,
                "message_length": len(message),
                "is_crisis": is_crisis,
            }
        )

        reply_text = await self._generate(session_id, session_id_hash)
        fallback = reply_text is None
        if fallback:
            reply_text = FALLBACK_MESSAGE
        else:
            self.store.append(session_id, Turn.assistant(reply_text))

        if is_crisis:
            self._raise_alert(session_id, session_id_hash, message, reply_text)

        return ChatReply(message=reply_text, is_crisis=is_crisis, fallback=fallback)

    def clear(self, session_id: str) -> None:
        """Forget a session's conversation."""
        self.store.clear(session_id)
        logger.info(
            "CHAT_SESSION_CLEARED",
            extra={"session_id_hash": hash_pii(session_id)}
        )

    async def _generate(self, session_id: str, session_id_hash: str) -> Optional[str]:
        if self.llm is None:
            logger.error(
                "LLM_GENERATION_FAILED",
                extra={
                    "session_id_hash": session_id_hash,
                    "error": "llm_not_configured",
                }
            )
            return None

        history = [turn.to_message() for turn in self.store.get_history(session_id)]
        try:
            response = await self.llm.generate(history, system_prompt=self.system_prompt)
        except Exception as e:
            logger.error(
                "LLM_GENERATION_FAILED",
                extra={
                    "session_id_hash": session_id_hash,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            return None

        if not response.text or not response.text.strip():
            logger.error(
                "LLM_GENERATION_FAILED",
                extra={
                    "session_id_hash": session_id_hash,
                    "error": "empty_response",
                }
            )
            return None
        return response.text

    def _raise_alert(
        self,
        session_id: str,
        session_id_hash: str,
        message: str,
        reply_text: str,
    ) -> None:
        logger.critical(
            "CRISIS_DETECTED_ALERTING",
            extra={
                "session_id_hash": session_id_hash,
                "alerts_enabled": self.alert_dispatcher is not None,
            }
        )
        if self.alert_dispatcher is None:
            return

        alert = CrisisAlert.create(
            session_id_hash=session_id_hash,
            triggering_message=message,
            assistant_reply=reply_text,
            recent_turns=self.store.recent(session_id, self.alert_history_turns),
            matched_rules=self.detector.matched_rules(message),
            pattern_version=self.detector.config.pattern_version,
        )
        try:
            self.alert_dispatcher.dispatch(alert)
        except Exception as e:
            # Never let alerting fail the chat response
            logger.critical(
                "CRISIS_ALERT_DISPATCH_FAILED",
                extra={
                    "alert_id": alert.alert_id,
                    "session_id_hash": session_id_hash,
                    "error": str(e),
                    "action": "MANUAL_REVIEW_REQUIRED",
                }
            )
