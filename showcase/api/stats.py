from fastapi import APIRouter, Depends

from showcase.api.deps import get_stats_service
from showcase.auth.dependencies import require_admin
from showcase.schemas import AuthContext, StatsResponse
from showcase.services.stats import StatsService

router = APIRouter(tags=["Stats"])


@router.get("/stats", response_model=StatsResponse)
async def public_stats(stats: StatsService = Depends(get_stats_service)):
    """Landing page counters. Public."""
    return await stats.get_stats()


@router.get("/admin/stats", response_model=StatsResponse)
async def admin_stats(
    auth: AuthContext = Depends(require_admin),
    stats: StatsService = Depends(get_stats_service)
):
    """
    Dashboard counters.
    Requires: admin
    """
    return await stats.get_stats()
