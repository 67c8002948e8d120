"""
Tests for repositories/jobs.py - Job model.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from jobly.exceptions import BadRequestError, NotFoundError
from jobly.repositories import JobRepository
from jobly.repositories.jobs import equity_to_db


async def job_id(db, title: str) -> int:
    rows = await db.query("SELECT id FROM jobs WHERE title = $1", [title])
    return rows[0]["id"]


class TestEquity:
    """Test equity normalization."""

    def test_decimal(self):
        assert equity_to_db(Decimal("0.25")) == "0.25"

    def test_float_keeps_its_repr(self):
        assert equity_to_db(0.1) == "0.1"

    def test_none(self):
        assert equity_to_db(None) is None

    def test_invalid(self):
        with pytest.raises(BadRequestError):
            equity_to_db("lots")


class TestCreate:
    """Test Job.create."""

    async def test_create_job(self, db, new_job):
        job = await JobRepository(db).create(new_job)

        assert isinstance(job["id"], int)
        assert {k: v for k, v in job.items() if k != "id"} == new_job

        rows = await db.query("SELECT equity FROM jobs WHERE id = $1", [job["id"]])
        assert rows == [{"equity": "0.25"}]

    async def test_create_without_salary_or_equity(self, db):
        job = await JobRepository(db).create({"title": "intern", "company_handle": "c3"})

        assert job["salary"] is None
        assert job["equity"] is None

    async def test_unknown_company(self, db, new_job):
        """The foreign key rejects jobs for missing companies."""
        new_job["company_handle"] = "nope"

        with pytest.raises(IntegrityError):
            await JobRepository(db).create(new_job)

    async def test_round_trip(self, db, new_job):
        jobs = JobRepository(db)
        job = await jobs.create(new_job)

        fetched = await jobs.get(job["id"])

        assert fetched == job
        assert fetched["equity"] == Decimal("0.25")


class TestFindAll:
    """Test Job.find_all."""

    async def test_no_filter(self, db, sample_jobs):
        jobs = await JobRepository(db).find_all()

        assert [{k: v for k, v in j.items() if k != "id"} for j in jobs] == sample_jobs

    async def test_title(self, db, new_job):
        new_job["title"] = "Senior Engineer"
        await JobRepository(db).create(new_job)

        jobs = await JobRepository(db).find_all({"title": "engine"})

        assert [j["title"] for j in jobs] == ["Senior Engineer"]

    async def test_min_salary(self, db):
        jobs = await JobRepository(db).find_all({"minSalary": 250})
        assert [j["title"] for j in jobs] == ["j3"]

    async def test_has_equity(self, db):
        """Zero and missing equity are both excluded."""
        jobs = await JobRepository(db).find_all({"hasEquity": True})
        assert [j["title"] for j in jobs] == ["j1"]

    async def test_has_equity_false(self, db):
        jobs = await JobRepository(db).find_all({"hasEquity": False})
        assert len(jobs) == 3

    async def test_combined(self, db):
        jobs = await JobRepository(db).find_all({"title": "j", "minSalary": 150, "hasEquity": True})
        assert jobs == []


class TestGet:
    """Test Job.get."""

    async def test_get(self, db):
        jid = await job_id(db, "j1")

        job = await JobRepository(db).get(jid)

        assert job == {
            "id": jid,
            "title": "j1",
            "salary": 100,
            "equity": Decimal("0.1"),
            "company_handle": "c1",
        }

    async def test_not_found(self, db):
        with pytest.raises(NotFoundError) as exc_info:
            await JobRepository(db).get(0)

        assert exc_info.value.message == "No job: 0"


class TestUpdate:
    """Test Job.update."""

    async def test_update(self, db):
        jid = await job_id(db, "j1")

        job = await JobRepository(db).update(
            jid, {"title": "New", "salary": 500, "equity": Decimal("0.5")}
        )

        assert job == {
            "id": jid,
            "title": "New",
            "salary": 500,
            "equity": Decimal("0.5"),
            "company_handle": "c1",
        }

    async def test_update_null_fields(self, db):
        jid = await job_id(db, "j1")

        job = await JobRepository(db).update(jid, {"salary": None, "equity": None})

        assert job["salary"] is None
        assert job["equity"] is None
        assert await JobRepository(db).get(jid) == job

    async def test_not_found(self, db):
        with pytest.raises(NotFoundError):
            await JobRepository(db).update(0, {"title": "New"})

    async def test_no_data(self, db):
        jid = await job_id(db, "j1")

        with pytest.raises(BadRequestError):
            await JobRepository(db).update(jid, {})

    async def test_id_is_immutable(self, db):
        jid = await job_id(db, "j1")

        with pytest.raises(BadRequestError) as exc_info:
            await JobRepository(db).update(jid, {"id": 999, "title": "Moved"})

        assert exc_info.value.message == "Cannot update: id"
        assert (await JobRepository(db).get(jid))["title"] == "j1"


class TestRemove:
    """Test Job.remove."""

    async def test_remove(self, db):
        jid = await job_id(db, "j1")

        assert await JobRepository(db).remove(jid) == jid
        assert await db.query("SELECT id FROM jobs WHERE id = $1", [jid]) == []

    async def test_not_found(self, db):
        with pytest.raises(NotFoundError):
            await JobRepository(db).remove(0)
