from .pareto import (
    crowding_distance,
    dominated_by_rows,
    dominates,
    dominates_rows,
    is_not_worse,
    not_worse_rows,
)

__all__ = [
    "crowding_distance",
    "dominated_by_rows",
    "dominates",
    "dominates_rows",
    "is_not_worse",
    "not_worse_rows",
]
