"""
Helpers for building parameterized SQL fragments.
"""

from typing import Any, Collection, Dict, List, Mapping, Optional, Tuple

from .database import placeholder
from .errors import ApiError


def build_assignment(
    updates: Mapping[str, Any],
    field_map: Mapping[str, str],
    allowed: Optional[Collection[str]] = None,
) -> Tuple[str, List[Any]]:
    """
    Build the SET clause of a partial UPDATE.

    Args:
        updates: Field name -> new value, e.g. {"numEmployees": 12, "name": "Acme"}
        field_map: Field name -> column name for fields whose column differs,
            e.g. {"numEmployees": "num_employees"}. Other fields are used as-is.
        allowed: Field names that may be updated. Column names are written
            into the SQL text, so callers pass the fixed set for their table.

    Returns:
        ('"num_employees"=:p1, "name"=:p2', [12, "Acme"])

        Values follow the key order of `updates`; the next free placeholder
        index is len(values) + 1.

    Raises:
        ApiError: validation kind if `updates` is empty or holds a field
            outside `allowed`
    """
    if not updates:
        raise ApiError.validation("No data")

    if allowed is not None:
        unknown = [key for key in updates if key not in allowed]
        if unknown:
            raise ApiError.validation(f"Cannot update field(s): {', '.join(unknown)}")

    cols = [
        f'"{field_map.get(key, key)}"={placeholder(idx)}'
        for idx, key in enumerate(updates, start=1)
    ]
    return ", ".join(cols), list(updates.values())
