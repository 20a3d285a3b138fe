"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Any, Dict, List

from jobly.database import Store, init_database
from jobly.models import CompanyModel, JobModel


SEED_COMPANIES = [
    {"handle": "c1", "name": "C1", "description": "Desc1", "numEmployees": 1, "logoUrl": "http://c1.img"},
    {"handle": "c2", "name": "C2", "description": "Desc2", "numEmployees": 2, "logoUrl": "http://c2.img"},
    {"handle": "c3", "name": "C3", "description": "Desc3", "numEmployees": 3, "logoUrl": "http://c3.img"},
]

SEED_JOBS = [
    {"title": "J1", "salary": 12345, "equity": "0.1", "companyHandle": "c1"},
    {"title": "J2", "salary": 54321, "equity": "0.1", "companyHandle": "c1"},
    {"title": "J3", "salary": 13579, "equity": "0.0", "companyHandle": "c1"},
]


@pytest.fixture
def db_url(tmp_path) -> str:
    """URL of a fresh, empty SQLite database."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    init_database(url)
    return url


@pytest.fixture
def store(db_url):
    store = Store.from_url(db_url)
    yield store
    store.dispose()


@pytest.fixture
def companies(store) -> CompanyModel:
    return CompanyModel(store)


@pytest.fixture
def jobs(store) -> JobModel:
    return JobModel(store)


@pytest.fixture
def seeded(companies, jobs) -> Dict[str, Any]:
    """Seed companies c1..c3 and jobs J1..J3 (all at c1); returns the job ids."""
    for data in SEED_COMPANIES:
        companies.create(data)
    job_ids: List[int] = [jobs.create(data)["id"] for data in SEED_JOBS]
    return {"job_ids": job_ids}


class UntouchableStore:
    """Store double that fails the test if any statement reaches it."""

    def execute(self, sql, params=()):
        raise AssertionError(f"store should not be touched: {sql}")


@pytest.fixture
def untouchable_store() -> UntouchableStore:
    return UntouchableStore()
