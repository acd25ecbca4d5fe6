"""Tests for the Chat Service HTTP handler."""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from jennifer.services.chat_service.config import ChatServiceConfig
from jennifer.services.chat_service.handler import build_relay, create_app
from jennifer.services.chat_service.relay import FALLBACK_MESSAGE, ChatRelay
from jennifer.services.conversation_service import ConversationStore
from jennifer.services.llm_service import LLMResponse, OpenAILLM
from jennifer.services.safety_service import CrisisDetector


TEST_CONFIG = ChatServiceConfig(
    api_key="sk-test",
    alerts_enabled=False,
    pii_salt="test_salt_that_is_at_least_32_characters_long",
)


@pytest.fixture
def llm():
    mock_llm = MagicMock()
    mock_llm.generate = AsyncMock(return_value=LLMResponse(
        text="I'm listening.",
        model="gpt-4o",
        provider="openai",
    ))
    return mock_llm


@pytest.fixture
def dispatcher():
    return MagicMock()


@pytest.fixture
def relay(llm, dispatcher):
    return ChatRelay(
        store=ConversationStore(),
        detector=CrisisDetector(),
        llm=llm,
        alert_dispatcher=dispatcher,
    )


@pytest.fixture
def client(relay):
    app = create_app(config=TEST_CONFIG, relay=relay)
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


class TestHealthEndpoint:

    def test_health_returns_200(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'healthy'
        assert data['service'] == 'chat-service'


class TestReadyEndpoint:

    def test_ready_with_model(self, client):
        response = client.get('/ready')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'ready'

    def test_not_ready_without_model(self):
        relay = ChatRelay(store=ConversationStore(), detector=CrisisDetector(), llm=None)
        app = create_app(config=TEST_CONFIG, relay=relay)

        response = app.test_client().get('/ready')

        assert response.status_code == 503


class TestChatEndpoint:

    def test_chat_returns_reply(self, client):
        response = client.post(
            '/api/chat',
            json={'message': 'Hello', 'sessionId': 'session-1'},
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data == {'message': "I'm listening.", 'isCrisis': False}

    def test_chat_flags_crisis(self, client, dispatcher):
        response = client.post(
            '/api/chat',
            json={'message': "I'm planning to end it all", 'sessionId': 'session-1'},
        )

        assert response.status_code == 200
        assert json.loads(response.data)['isCrisis'] is True
        dispatcher.dispatch.assert_called_once()

    def test_conversation_accumulates(self, client, relay, llm):
        client.post('/api/chat', json={'message': 'first', 'sessionId': 'session-1'})
        client.post('/api/chat', json={'message': 'second', 'sessionId': 'session-1'})

        history = llm.generate.call_args.args[0]
        assert [m['content'] for m in history] == ['first', "I'm listening.", 'second']

    @pytest.mark.parametrize("body", [
        {'sessionId': 'session-1'},
        {'message': 'Hello'},
        {'message': '', 'sessionId': 'session-1'},
        {'message': 'Hello', 'sessionId': ''},
        {'message': 42, 'sessionId': 'session-1'},
        {'message': 'Hello', 'sessionId': 7},
        {},
    ])
    def test_missing_fields_rejected(self, client, body):
        response = client.post('/api/chat', json=body)

        assert response.status_code == 400
        assert json.loads(response.data) == {'error': 'Message and sessionId required'}

    def test_whitespace_session_id_accepted(self, client, relay):
        response = client.post('/api/chat', json={'message': 'Hello', 'sessionId': ' '})

        assert response.status_code == 200
        assert [t.content for t in relay.store.get_history(' ')] == ['Hello', "I'm listening."]

    def test_whitespace_message_accepted(self, client, llm):
        response = client.post('/api/chat', json={'message': '  ', 'sessionId': 'session-1'})

        assert response.status_code == 200
        assert json.loads(response.data) == {'message': "I'm listening.", 'isCrisis': False}
        history = llm.generate.call_args.args[0]
        assert history == [{'role': 'user', 'content': '  '}]

    def test_non_json_body_rejected(self, client):
        response = client.post('/api/chat', data='not json', content_type='text/plain')
        assert response.status_code == 400

    def test_model_failure_returns_fallback(self, client, llm):
        llm.generate.side_effect = RuntimeError("api key sk-live-123 rejected")

        response = client.post(
            '/api/chat',
            json={'message': 'Hello', 'sessionId': 'session-1'},
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['message'] == FALLBACK_MESSAGE
        assert 'sk-live' not in response.get_data(as_text=True)

    def test_unexpected_error_hides_internals(self, client, relay):
        with patch.object(relay, 'handle_message', AsyncMock(side_effect=KeyError('internal'))):
            response = client.post(
                '/api/chat',
                json={'message': 'Hello', 'sessionId': 'session-1'},
            )

        assert response.status_code == 500
        assert json.loads(response.data) == {'error': 'Something went wrong. Please try again.'}


class TestClearEndpoint:

    def test_clear_session(self, client, relay):
        client.post('/api/chat', json={'message': 'Hello', 'sessionId': 'session-1'})

        response = client.post('/api/clear', json={'sessionId': 'session-1'})

        assert response.status_code == 200
        assert json.loads(response.data) == {'success': True}
        assert relay.store.get_history('session-1') == ()

    def test_clear_without_session_id_succeeds(self, client):
        response = client.post('/api/clear', json={})
        assert response.status_code == 200
        assert json.loads(response.data) == {'success': True}

    def test_clear_unknown_session_succeeds(self, client):
        response = client.post('/api/clear', json={'sessionId': 'never-seen'})
        assert response.status_code == 200


class TestBuildRelay:

    def test_builds_openai_client(self):
        relay = build_relay(TEST_CONFIG)

        assert isinstance(relay.llm, OpenAILLM)
        assert relay.alert_dispatcher is None
        assert relay.store.max_turns == 50

    def test_missing_api_key_runs_on_fallback(self):
        config = ChatServiceConfig(alerts_enabled=False)

        relay = build_relay(config)

        assert relay.llm is None

    def test_alerts_enabled_builds_dispatcher(self):
        config = ChatServiceConfig(
            api_key="sk-test",
            alert_recipient="reviewer@example.com",
        )

        relay = build_relay(config)

        assert relay.alert_dispatcher is not None
        assert relay.alert_dispatcher.publisher.recipient == "reviewer@example.com"
        relay.alert_dispatcher.shutdown()


class TestConfigFromEnv:

    def test_defaults(self, monkeypatch):
        for name in ("PORT", "LLM_PROVIDER", "SESSION_TTL_SECONDS", "ALERT_SENDER", "SMTP_USER"):
            monkeypatch.delenv(name, raising=False)

        config = ChatServiceConfig.from_env()

        assert config.port == 3000
        assert config.llm_provider == "openai"
        assert config.session_ttl_seconds is None
        assert config.alert_sender == "alerts@therapist.app"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("SESSION_TTL_SECONDS", "3600")
        monkeypatch.setenv("SMTP_USER", "bot@example.com")
        monkeypatch.delenv("ALERT_SENDER", raising=False)
        monkeypatch.setenv("CRISIS_ALERTS_ENABLED", "false")

        config = ChatServiceConfig.from_env()

        assert config.port == 8080
        assert config.session_ttl_seconds == 3600.0
        assert config.alert_sender == "bot@example.com"
        assert config.alerts_enabled is False
