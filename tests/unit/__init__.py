"""
Unit tests for auth-negotiation.

Test individual components in isolation:
- Retry engine (transition table, caches, prompts, STS, secure channel)
- Response classification and redirect-safe credentials
- httpx transport (against httpx.MockTransport)
- Proxy and credential caches
- Credential providers
- STS token helper
"""
