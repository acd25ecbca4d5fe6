"""Chat Service HTTP handler.

Routes:
    POST /api/chat   {"message", "sessionId"} -> {"message", "isCrisis"}
    POST /api/clear  {"sessionId"}            -> {"success": true}
    GET  /health, GET /ready

Session identifiers are hashed before logging; message text is never
logged.
"""
import logging
from typing import Optional

from flask import Flask, jsonify, request

from jennifer.shared.utils import configure_pii_salt, hash_pii
from ..conversation_service import ConversationStore
from ..llm_service import LLMConfig, LLMProvider, create_llm
from ..safety_service import CrisisAlertDispatcher, CrisisAlertPublisher, CrisisDetector
from .config import ChatServiceConfig
from .relay import ChatRelay

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please try again."


def build_relay(config: ChatServiceConfig) -> ChatRelay:
    """Wire the relay and its collaborators from configuration.

    A model client that cannot be built (missing key, unknown provider)
    leaves the relay running on fallback replies rather than failing
    startup.
    """
    llm = None
    try:
        llm = create_llm(LLMConfig(
            provider=LLMProvider(config.llm_provider),
            model_name=config.model_name,
            endpoint=config.model_endpoint,
            api_key=config.api_key,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            timeout_seconds=config.timeout_seconds,
        ))
    except ValueError as e:
        logger.error(
            "LLM_INIT_FAILED",
            extra={"provider": config.llm_provider, "error": str(e)}
        )

    dispatcher = None
    if config.alerts_enabled:
        publisher = CrisisAlertPublisher(
            recipient=config.alert_recipient,
            sender=config.alert_sender,
            transport=config.alert_transport,
            smtp_host=config.smtp_host,
            smtp_port=config.smtp_port,
            smtp_user=config.smtp_user,
            smtp_password=config.smtp_password,
            region=config.aws_region,
        )
        dispatcher = CrisisAlertDispatcher(publisher)

    return ChatRelay(
        store=ConversationStore(
            max_turns=config.max_history_turns,
            session_ttl_seconds=config.session_ttl_seconds,
        ),
        detector=CrisisDetector(),
        llm=llm,
        alert_dispatcher=dispatcher,
        alert_history_turns=config.alert_history_turns,
    )


def _text_field(data: dict, name: str) -> Optional[str]:
    value = data.get(name)
    if isinstance(value, str) and value:
        return value
    return None


def create_app(
    config: Optional[ChatServiceConfig] = None,
    relay: Optional[ChatRelay] = None,
) -> Flask:
    """Create the Flask application.

    Args:
        config: Service configuration (defaults to environment)
        relay: Pre-built relay; built from config when omitted
    """
    config = config or ChatServiceConfig.from_env()
    configure_pii_salt(config.pii_salt)
    relay = relay or build_relay(config)

    app = Flask(__name__)
    app.extensions["chat_relay"] = relay

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "healthy",
            "service": "chat-service",
            "model": config.model_name,
        }), 200

    @app.route("/ready", methods=["GET"])
    def ready():
        """Readiness check - verifies a model client is configured."""
        if not relay.ready:
            return jsonify({"status": "not_ready", "reason": "llm_not_configured"}), 503
        return jsonify({"status": "ready", "sessions": relay.store.session_count()}), 200

    @app.route("/api/chat", methods=["POST"])
    async def chat():
        """Relay one user message and return Jennifer's reply."""
        data = request.get_json(silent=True) or {}
        message = _text_field(data, "message")
        session_id = _text_field(data, "sessionId")

        if message is None or session_id is None:
            logger.warning(
                "CHAT_REQUEST_INVALID",
                extra={
                    "has_message": message is not None,
                    "has_session_id": session_id is not None,
                }
            )
            return jsonify({"error": "Message and sessionId required"}), 400

        relay.store.evict_stale()

        try:
            reply = await relay.handle_message(session_id, message)
        except Exception as e:
            logger.error(
                "CHAT_REQUEST_FAILED",
                extra={
                    "session_id_hash": hash_pii(session_id),
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            return jsonify({"error": GENERIC_ERROR}), 500

        return jsonify(reply.to_dict()), 200

    @app.route("/api/clear", methods=["POST"])
    def clear():
        """Forget a session's conversation."""
        data = request.get_json(silent=True) or {}
        session_id = _text_field(data, "sessionId")
        if session_id is not None:
            relay.clear(session_id)
        return jsonify({"success": True}), 200

    return app


if __name__ == "__main__":
    from dotenv import load_dotenv

    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    service_config = ChatServiceConfig.from_env()
    application = create_app(service_config)
    logger.info("CHAT_SERVICE_STARTING", extra={"port": service_config.port})
    application.run(host="0.0.0.0", port=service_config.port, debug=False)
