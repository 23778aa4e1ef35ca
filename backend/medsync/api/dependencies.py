"""Route Dependencies — resolve the per-app engine and analyst from app.state.

Invariants:
    - Routes never construct engines; main.py lifespan owns creation and teardown
"""

from fastapi import Request

from medsync.services.network_analyst import NetworkAnalyst
from medsync.services.sync_engine import InventorySyncEngine


def get_engine(request: Request) -> InventorySyncEngine:
    return request.app.state.engine


def get_analyst(request: Request) -> NetworkAnalyst:
    return request.app.state.analyst
