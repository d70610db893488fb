"""
Shelter statistics endpoint.
"""

from fastapi import APIRouter

from ....schemas.stats import StatsRead
from ....services.statistics_service import StatisticsService


router = APIRouter()


@router.get("", response_model=StatsRead)
async def get_stats() -> StatsRead:
    """Number of pets and fosters, fostered pets and average foster length in days."""
    return await StatisticsService.overview()
