"""
Aggregated shelter statistics returned by ``GET /api/stats``.
"""

from .common import ApiModel


class StatsRead(ApiModel):
    nr_of_pets: int
    nr_of_foster: int
    nr_of_fostered_pets: int
    # Average length in days of fosters that have an end date.
    avg_foster_duration: float
