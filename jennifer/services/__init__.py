"""Jennifer relay services.

- safety_service: crisis-language detection and counselor alerting
- conversation_service: bounded per-session conversation memory
- llm_service: hosted language-model clients and the persona prompt
- chat_service: HTTP relay composing the services above
"""
