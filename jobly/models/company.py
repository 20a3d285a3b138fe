"""
Companies: search query building and CRUD over the companies table.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from ..database import Store, format_equity, placeholder
from ..errors import ApiError
from ..logger import get_logger
from ..sql import build_assignment

logger = get_logger()

COMPANY_COLUMNS = """handle,
                     name,
                     description,
                     num_employees AS "numEmployees",
                     logo_url AS "logoUrl\""""

UPDATE_FIELDS = ("name", "description", "numEmployees", "logoUrl")
UPDATE_COLUMNS = {"numEmployees": "num_employees", "logoUrl": "logo_url"}
FILTER_FIELDS = ("name", "minEmployees", "maxEmployees")


def build_company_search(filters: Optional[Mapping[str, Any]] = None) -> Tuple[str, List[Any]]:
    """
    Build the listing query for companies.

    Filters (all optional): name (case-insensitive substring),
    minEmployees, maxEmployees. Predicates are ANDed in that fixed order:
    minEmployees, maxEmployees, name.

    Raises:
        ApiError: validation kind for unknown filters or minEmployees > maxEmployees
    """
    filters = dict(filters or {})
    unknown = [key for key in filters if key not in FILTER_FIELDS]
    if unknown:
        raise ApiError.validation(f"Unknown company filter(s): {', '.join(unknown)}")

    name = filters.get("name")
    min_employees = filters.get("minEmployees")
    max_employees = filters.get("maxEmployees")

    if min_employees is not None and max_employees is not None and min_employees > max_employees:
        raise ApiError.validation("Minimum employees cannot exceed maximum employees")

    where: List[str] = []
    values: List[Any] = []

    if min_employees is not None:
        values.append(min_employees)
        where.append(f"num_employees >= {placeholder(len(values))}")

    if max_employees is not None:
        values.append(max_employees)
        where.append(f"num_employees <= {placeholder(len(values))}")

    if name:
        values.append(f"%{name}%")
        where.append(f"LOWER(name) LIKE LOWER({placeholder(len(values))})")

    sql = f"SELECT {COMPANY_COLUMNS} FROM companies"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY name"
    return sql, values


class CompanyModel:
    """CRUD operations for companies. Stateless apart from the store it wraps."""

    def __init__(self, store: Store):
        self.store = store

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a company from {handle, name, description, numEmployees, logoUrl}.

        Raises ApiError (conflict) if the handle is taken.
        """
        handle = data.get("handle")
        if self._exists(handle):
            logger.warning("Duplicate company handle", handle=handle)
            raise ApiError.conflict(f"Duplicate company: {handle}")

        try:
            rows = self.store.execute(
                f"""INSERT INTO companies
                        (handle, name, description, num_employees, logo_url)
                    VALUES ({placeholder(1)}, {placeholder(2)}, {placeholder(3)},
                            {placeholder(4)}, {placeholder(5)})
                    RETURNING {COMPANY_COLUMNS}""",
                [
                    handle,
                    data.get("name"),
                    data.get("description"),
                    data.get("numEmployees"),
                    data.get("logoUrl"),
                ],
            )
        except IntegrityError as e:
            # Lost a race with another create of the same handle
            if self._exists(handle):
                raise ApiError.conflict(f"Duplicate company: {handle}") from e
            raise ApiError.validation(f"Invalid company data: {e.orig}") from e

        logger.info("Company created", handle=handle)
        return rows[0]

    def find_all(self, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Companies ordered by name, narrowed by the optional filters."""
        sql, values = build_company_search(filters)
        return self.store.execute(sql, values)

    def get(self, handle: str) -> Dict[str, Any]:
        """
        Company data plus its jobs as [{id, title, salary, equity, companyHandle}, ...].

        Raises ApiError (not found) if missing.
        """
        rows = self.store.execute(
            f"SELECT {COMPANY_COLUMNS} FROM companies WHERE handle = {placeholder(1)}",
            [handle],
        )
        if not rows:
            raise self._not_found(handle)

        company = rows[0]
        jobs = self.store.execute(
            f"""SELECT id,
                       title,
                       salary,
                       equity,
                       company_handle AS "companyHandle"
                FROM jobs
                WHERE company_handle = {placeholder(1)}
                ORDER BY id""",
            [handle],
        )
        company["jobs"] = [{**job, "equity": format_equity(job["equity"])} for job in jobs]
        return company

    def update(self, handle: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Partial update; only the given fields among
        name, description, numEmployees, logoUrl change.
        """
        set_cols, values = build_assignment(data, UPDATE_COLUMNS, allowed=UPDATE_FIELDS)
        handle_idx = placeholder(len(values) + 1)

        try:
            rows = self.store.execute(
                f"""UPDATE companies
                    SET {set_cols}
                    WHERE handle = {handle_idx}
                    RETURNING {COMPANY_COLUMNS}""",
                [*values, handle],
            )
        except IntegrityError as e:
            raise ApiError.validation(f"Invalid company data: {e.orig}") from e

        if not rows:
            raise self._not_found(handle)
        return rows[0]

    def remove(self, handle: str) -> None:
        rows = self.store.execute(
            f"DELETE FROM companies WHERE handle = {placeholder(1)} RETURNING handle",
            [handle],
        )
        if not rows:
            raise self._not_found(handle)
        logger.info("Company removed", handle=handle)

    def _exists(self, handle: Any) -> bool:
        rows = self.store.execute(
            f"SELECT handle FROM companies WHERE handle = {placeholder(1)}",
            [handle],
        )
        return bool(rows)

    def _not_found(self, handle: str) -> ApiError:
        logger.warning("Company not found", handle=handle)
        return ApiError.not_found(f"No company: {handle}")
