"""
Jobs Repository.

Responsibilities:
- CRUD operations for the jobs table.
- Keeping equity as exact decimal text in the store.

Non-Responsibilities:
- No request validation.
- No company existence checks (the foreign key enforces them).

Invariant:
Equity is never bound as a float.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from ..database import Database
from ..exceptions import BadRequestError, NotFoundError
from ..logger import get_logger
from ..sql import sql_for_job_filters, sql_for_partial_update, where_sql

logger = get_logger()

JOB_COLUMNS = "id, title, salary, equity, company_handle"

JS_TO_SQL = {
    "companyHandle": "company_handle",
}

# Store-assigned, never changed by update
IMMUTABLE_FIELDS = ("id",)


def equity_to_db(value: Any) -> Optional[str]:
    """Normalize equity to decimal text; str() first so floats keep their repr."""
    if value is None:
        return None
    try:
        return str(Decimal(str(value)))
    except InvalidOperation as e:
        raise BadRequestError(f"Invalid equity: {value}") from e


def _from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    job = dict(row)
    if job["equity"] is not None:
        job["equity"] = Decimal(job["equity"])
    return job


class JobRepository:
    """Job records as {id, title, salary, equity, company_handle}."""

    def __init__(self, db: Database):
        self.db = db

    def _not_found(self, job_id: int) -> NotFoundError:
        logger.record_model_error("NotFoundError")
        logger.warning("Job not found", id=job_id)
        return NotFoundError(f"No job: {job_id}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a job and return it with its assigned id.

        Args:
            data: {title, salary, equity, company_handle}; salary and equity may be None

        Raises:
            IntegrityError: If company_handle does not name a company
        """
        rows = await self.db.query(
            f"""INSERT INTO jobs (title, salary, equity, company_handle)
                VALUES ($1, $2, $3, $4)
                RETURNING {JOB_COLUMNS}""",
            [
                data.get("title"),
                data.get("salary"),
                equity_to_db(data.get("equity")),
                data.get("company_handle"),
            ],
        )
        job = _from_row(rows[0])
        logger.info("Job created", id=job["id"], company_handle=job["company_handle"])
        return job

    async def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Find jobs matching optional filters, ordered by title.

        Args:
            filters: Any of {title, minSalary, hasEquity}
        """
        where, values = sql_for_job_filters(filters or {})
        rows = await self.db.query(
            f"""SELECT {JOB_COLUMNS}
                  FROM jobs
                  {where_sql(where)}
                 ORDER BY title, id""",
            values,
        )
        return [_from_row(row) for row in rows]

    async def get(self, job_id: int) -> Dict[str, Any]:
        """Return the job with this id, or raise NotFoundError."""
        rows = await self.db.query(
            f"""SELECT {JOB_COLUMNS}
                  FROM jobs
                 WHERE id = $1""",
            [job_id],
        )
        if not rows:
            raise self._not_found(job_id)
        return _from_row(rows[0])

    async def update(self, job_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partially update a job; only the given fields change.

        Raises:
            BadRequestError: If data is empty or tries to change the id
            NotFoundError: If no such job
        """
        immutable = [f for f in IMMUTABLE_FIELDS if f in data]
        if immutable:
            logger.record_model_error("BadRequestError")
            raise BadRequestError(f"Cannot update: {', '.join(immutable)}")

        if "equity" in data:
            data = {**data, "equity": equity_to_db(data["equity"])}

        set_cols, values = sql_for_partial_update(data, JS_TO_SQL)
        id_idx = f"${len(values) + 1}"

        rows = await self.db.query(
            f"""UPDATE jobs
                   SET {set_cols}
                 WHERE id = {id_idx}
                RETURNING {JOB_COLUMNS}""",
            [*values, job_id],
        )
        if not rows:
            raise self._not_found(job_id)

        logger.info("Job updated", id=job_id, fields=list(data))
        return _from_row(rows[0])

    async def remove(self, job_id: int) -> int:
        """Delete a job; return the deleted id."""
        rows = await self.db.query(
            """DELETE
                 FROM jobs
                WHERE id = $1
                RETURNING id""",
            [job_id],
        )
        if not rows:
            raise self._not_found(job_id)

        logger.info("Job removed", id=job_id)
        return rows[0]["id"]
