"""
Service layer for shelter statistics.

All queries are read-only aggregates over the pets and fosters tables.
"""

from __future__ import annotations

from ..core.db import get_connection
from ..schemas.stats import StatsRead


class StatisticsService:
    """Service providing aggregated shelter figures."""

    @classmethod
    async def overview(cls) -> StatsRead:
        """Return pet and foster counts and the average foster length.

        Fosters whose pet was deleted are not counted as fostered pets.
        The average duration covers fosters with an end date only and is
        ``0`` when there are none.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            pets_count = cursor.execute("SELECT COUNT(*) FROM pets").fetchone()[0]
            fosters_count = cursor.execute("SELECT COUNT(*) FROM fosters").fetchone()[0]
            fostered_pets = cursor.execute(
                "SELECT COUNT(DISTINCT pet_id) FROM fosters"
            ).fetchone()[0]
            avg_duration = cursor.execute(
                "SELECT AVG(julianday(end_date) - julianday(start_date)) "
                "FROM fosters WHERE end_date IS NOT NULL"
            ).fetchone()[0]
            return StatsRead(
                nr_of_pets=pets_count,
                nr_of_foster=fosters_count,
                nr_of_fostered_pets=fostered_pets,
                avg_foster_duration=round(avg_duration or 0.0, 2),
            )
        finally:
            conn.close()
