"""
Column header sort hints for the admin listings.
"""

from enum import Enum
from typing import Dict, Optional, Type


def next_sort_orders(sort_enum: Type[Enum], current: Optional[Enum]) -> Dict[str, Optional[str]]:
    """Return the ``sortOrder`` each column header should link to.

    A column that is not the current sort column starts ascending, the
    current ascending column switches to descending, and the current
    descending column goes back to the default order (``None``).
    """
    hints: Dict[str, Optional[str]] = {}
    for member in sort_enum:
        field, _, _ = member.value.rpartition("_")
        if field in hints:
            continue
        if current is None or not current.value.startswith(f"{field}_"):
            hints[field] = f"{field}_asc"
        elif current.value == f"{field}_asc":
            hints[field] = f"{field}_desc"
        else:
            hints[field] = None
    return hints
