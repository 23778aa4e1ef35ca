"""Service test fixtures — started sync engines and the FastAPI test client.

Invariants:
    - Every test gets a fresh engine (no shared state between tests)
    - Engines are started on the test's event loop and shut down on teardown
    - app.state.engine / app.state.analyst are swapped per test and restored

Design Decisions:
    - ASGITransport does not run lifespan, so the fixture wires app.state itself
"""

import pytest
from httpx import ASGITransport, AsyncClient

from medsync.main import app
from medsync.services.network_analyst import NetworkAnalyst

from tests.services.engine_factory import build_engine
from tests.services.mock_anthropic import MockAnthropicClient, text_response


@pytest.fixture
async def engine():
    """Started engine in FIELD context (simulator idle)."""
    eng = build_engine()
    eng.start()
    yield eng
    eng.shutdown()


@pytest.fixture
def mock_client():
    return MockAnthropicClient([text_response("Move O2 from Al-Shifa to Nasser.")])


@pytest.fixture
async def client(engine, mock_client):
    """FastAPI test client bound to the per-test engine."""
    previous = {
        key: getattr(app.state, key, None) for key in ("engine", "analyst")
    }
    app.state.engine = engine
    app.state.analyst = NetworkAnalyst(mock_client, model="test-model")

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    for key, value in previous.items():
        setattr(app.state, key, value)
