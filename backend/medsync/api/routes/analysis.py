"""Analysis Route — on-demand logistics assessment of the current network.

Invariants:
    - Always 200: collaborator failures come back as the fallback text
    - The engine snapshot is taken before the collaborator call
"""

from fastapi import APIRouter, Depends

from medsync.api.dependencies import get_analyst, get_engine
from medsync.schemas.inventory import AnalysisResponse
from medsync.services.network_analyst import NetworkAnalyst
from medsync.services.sync_engine import InventorySyncEngine

router = APIRouter(prefix="/api/v1/analysis", tags=["analysis"])


@router.post("", response_model=AnalysisResponse)
async def post_analysis(
    engine: InventorySyncEngine = Depends(get_engine),
    analyst: NetworkAnalyst = Depends(get_analyst),
):
    snapshot = engine.network
    return AnalysisResponse(analysis=await analyst.analyze(snapshot))
