"""
Companies Repository.

Responsibilities:
- CRUD operations for the companies table.
- Mapping missing rows and duplicate handles to model errors.

Non-Responsibilities:
- No request validation.
- No authorization.
- No transactions spanning more than one statement.

Invariant:
Every statement is parameterized; only column names owned by this module
are interpolated into SQL.
"""

from typing import Any, Dict, List, Optional

from ..database import Database
from ..exceptions import BadRequestError, DuplicateError, NotFoundError
from ..logger import get_logger
from ..sql import sql_for_company_filters, sql_for_partial_update, where_sql

logger = get_logger()

COMPANY_COLUMNS = 'handle, name, description, num_employees AS "numEmployees", logo_url AS "logoUrl"'

# Request field -> column, for fields whose names differ
JS_TO_SQL = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}

# Set at creation, never changed by update
IMMUTABLE_FIELDS = ("handle",)


class CompanyRepository:
    """Company records as {handle, name, description, numEmployees, logoUrl}."""

    def __init__(self, db: Database):
        self.db = db

    def _not_found(self, handle: str) -> NotFoundError:
        logger.record_model_error("NotFoundError")
        logger.warning("Company not found", handle=handle)
        return NotFoundError(f"No company: {handle}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a company and return it.

        Args:
            data: {handle, name, description, numEmployees, logoUrl}

        Raises:
            DuplicateError: If a company with this handle already exists
        """
        handle = data["handle"]
        duplicate_check = await self.db.query(
            """SELECT handle
                 FROM companies
                WHERE handle = $1""",
            [handle],
        )
        if duplicate_check:
            logger.record_model_error("DuplicateError")
            logger.warning("Duplicate company", handle=handle)
            raise DuplicateError(f"Duplicate company: {handle}")

        rows = await self.db.query(
            f"""INSERT INTO companies
                       (handle, name, description, num_employees, logo_url)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {COMPANY_COLUMNS}""",
            [
                handle,
                data.get("name"),
                data.get("description"),
                data.get("numEmployees"),
                data.get("logoUrl"),
            ],
        )
        logger.info("Company created", handle=handle)
        return rows[0]

    async def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Find companies matching optional filters, ordered by name.

        Args:
            filters: Any of {name, minEmployees, maxEmployees}

        Raises:
            BadRequestError: If minEmployees > maxEmployees
        """
        filters = filters or {}
        min_employees = filters.get("minEmployees")
        max_employees = filters.get("maxEmployees")

        if min_employees is not None and max_employees is not None and min_employees > max_employees:
            logger.record_model_error("BadRequestError")
            logger.warning("Rejected company filters", filters=filters)
            raise BadRequestError("Min Employees must be less than Max Employees")

        where, values = sql_for_company_filters(filters)
        return await self.db.query(
            f"""SELECT {COMPANY_COLUMNS}
                  FROM companies
                  {where_sql(where)}
                 ORDER BY name""",
            values,
        )

    async def get(self, handle: str) -> Dict[str, Any]:
        """Return the company with this handle, or raise NotFoundError."""
        rows = await self.db.query(
            f"""SELECT {COMPANY_COLUMNS}
                  FROM companies
                 WHERE handle = $1""",
            [handle],
        )
        if not rows:
            raise self._not_found(handle)
        return rows[0]

    async def update(self, handle: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partially update a company; only the given fields change.

        Args:
            handle: Company to update
            data: Any of {name, description, numEmployees, logoUrl}; None clears

        Raises:
            BadRequestError: If data is empty or tries to change the handle
            NotFoundError: If no such company
        """
        immutable = [f for f in IMMUTABLE_FIELDS if f in data]
        if immutable:
            logger.record_model_error("BadRequestError")
            raise BadRequestError(f"Cannot update: {', '.join(immutable)}")

        set_cols, values = sql_for_partial_update(data, JS_TO_SQL)
        handle_idx = f"${len(values) + 1}"

        rows = await self.db.query(
            f"""UPDATE companies
                   SET {set_cols}
                 WHERE handle = {handle_idx}
                RETURNING {COMPANY_COLUMNS}""",
            [*values, handle],
        )
        if not rows:
            raise self._not_found(handle)

        logger.info("Company updated", handle=handle, fields=list(data))
        return rows[0]

    async def remove(self, handle: str) -> str:
        """Delete a company (and its jobs); return the deleted handle."""
        rows = await self.db.query(
            """DELETE
                 FROM companies
                WHERE handle = $1
                RETURNING handle""",
            [handle],
        )
        if not rows:
            raise self._not_found(handle)

        logger.info("Company removed", handle=handle)
        return rows[0]["handle"]
