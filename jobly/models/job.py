"""
Jobs: search query building and CRUD over the jobs table.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from ..database import Store, format_equity, placeholder
from ..errors import ApiError
from ..logger import get_logger
from ..sql import build_assignment
from .company import COMPANY_COLUMNS

logger = get_logger()

JOB_COLUMNS = """id,
                 title,
                 salary,
                 equity,
                 company_handle AS "companyHandle\""""

UPDATE_FIELDS = ("title", "salary", "equity")
FILTER_FIELDS = ("title", "minSalary", "hasEquity")


def serialize_job(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {**row, "equity": format_equity(row.get("equity"))}


def _equity_param(value: Any) -> Optional[str]:
    # Bound as text so Decimal/float input reaches NUMERIC unchanged
    return None if value is None else str(value)


def build_job_search(filters: Optional[Mapping[str, Any]] = None) -> Tuple[str, List[Any]]:
    """
    Build the listing query for jobs, joined to companies for the company name.

    Filters (all optional), ANDed in this order:
        hasEquity: only True adds a predicate (equity > 0)
        title: case-insensitive substring
        minSalary: salary >= minSalary

    Raises:
        ApiError: validation kind for unknown filters
    """
    filters = dict(filters or {})
    unknown = [key for key in filters if key not in FILTER_FIELDS]
    if unknown:
        raise ApiError.validation(f"Unknown job filter(s): {', '.join(unknown)}")

    title = filters.get("title")
    min_salary = filters.get("minSalary")

    where: List[str] = []
    values: List[Any] = []

    if filters.get("hasEquity") is True:
        where.append("j.equity > 0")

    if title is not None:
        values.append(f"%{title}%")
        where.append(f"LOWER(j.title) LIKE LOWER({placeholder(len(values))})")

    if min_salary is not None:
        values.append(min_salary)
        where.append(f"j.salary >= {placeholder(len(values))}")

    sql = """SELECT j.id,
                    j.title,
                    j.salary,
                    j.equity,
                    j.company_handle AS "companyHandle",
                    c.name
             FROM jobs AS j
             JOIN companies AS c ON j.company_handle = c.handle"""
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY j.title"
    return sql, values


class JobModel:
    """CRUD operations for jobs. Stateless apart from the store it wraps."""

    def __init__(self, store: Store):
        self.store = store

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a job from {title, salary, equity, companyHandle}.

        Returns {id, title, salary, equity, companyHandle}; the id is assigned
        by the store. A companyHandle with no matching company is a
        validation error.
        """
        try:
            rows = self.store.execute(
                f"""INSERT INTO jobs (title, salary, equity, company_handle)
                    VALUES ({placeholder(1)}, {placeholder(2)}, {placeholder(3)}, {placeholder(4)})
                    RETURNING {JOB_COLUMNS}""",
                [
                    data.get("title"),
                    data.get("salary"),
                    _equity_param(data.get("equity")),
                    data.get("companyHandle"),
                ],
            )
        except IntegrityError as e:
            raise ApiError.validation(f"Invalid job data: {e.orig}") from e

        job = serialize_job(rows[0])
        logger.info("Job created", id=job["id"], company_handle=job["companyHandle"])
        return job

    def find_all(self, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Jobs ordered by title, each with its company's name."""
        sql, values = build_job_search(filters)
        return [serialize_job(row) for row in self.store.execute(sql, values)]

    def get(self, job_id: int) -> Dict[str, Any]:
        """
        Job data with the full company record nested under companyHandle.

        The two reads are not in one transaction; if the company disappears
        between them, companyHandle is None.
        """
        rows = self.store.execute(
            f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = {placeholder(1)}",
            [job_id],
        )
        if not rows:
            raise self._not_found(job_id)
        job = serialize_job(rows[0])

        companies = self.store.execute(
            f"SELECT {COMPANY_COLUMNS} FROM companies WHERE handle = {placeholder(1)}",
            [job["companyHandle"]],
        )
        job["companyHandle"] = companies[0] if companies else None
        return job

    def update(self, job_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Partial update of title, salary and equity. id and companyHandle never change."""
        updates = dict(data)
        if "equity" in updates:
            updates["equity"] = _equity_param(updates["equity"])
        set_cols, values = build_assignment(updates, {}, allowed=UPDATE_FIELDS)
        id_idx = placeholder(len(values) + 1)

        try:
            rows = self.store.execute(
                f"UPDATE jobs SET {set_cols} WHERE id = {id_idx} RETURNING {JOB_COLUMNS}",
                [*values, job_id],
            )
        except IntegrityError as e:
            raise ApiError.validation(f"Invalid job data: {e.orig}") from e

        if not rows:
            raise self._not_found(job_id)
        return serialize_job(rows[0])

    def remove(self, job_id: int) -> None:
        rows = self.store.execute(
            f"DELETE FROM jobs WHERE id = {placeholder(1)} RETURNING id",
            [job_id],
        )
        if not rows:
            raise self._not_found(job_id)
        logger.info("Job removed", id=job_id)

    def _not_found(self, job_id: Any) -> ApiError:
        logger.warning("Job not found", id=job_id)
        return ApiError.not_found(f"No job: {job_id}")
