"""
SQL fragment builders.

Every builder here is a pure function: it takes sparse, optional fields
and returns a clause using `$n` positional placeholders together with the
values those placeholders bind to. Placeholder `$i` always binds to
`values[i - 1]`.

Column names are owned by application code, never by callers.
"""

from typing import Any, List, Mapping, NamedTuple, Optional, Tuple

from .exceptions import BadRequestError


class PartialUpdate(NamedTuple):
    set_cols: str
    values: List[Any]


class WhereClause(NamedTuple):
    where: str
    values: List[Any]


def sql_for_partial_update(
    data_to_update: Mapping[str, Any],
    js_to_sql: Optional[Mapping[str, str]] = None,
) -> PartialUpdate:
    """
    Build the SET column list for a partial update.

    Args:
        data_to_update: Fields to change, e.g. {"numEmployees": 10, "logoUrl": None}
        js_to_sql: Field name -> column name for fields whose column differs

    Returns:
        PartialUpdate(set_cols, values)

    Raises:
        BadRequestError: If there is nothing to update

    Example:
        >>> sql_for_partial_update({"firstName": "Aliya", "age": 32},
        ...                        {"firstName": "first_name"})
        PartialUpdate(set_cols='"first_name"=$1, "age"=$2', values=['Aliya', 32])
    """
    if not data_to_update:
        raise BadRequestError("No data")

    js_to_sql = js_to_sql or {}
    cols = [
        f'"{js_to_sql.get(name, name)}"=${idx}'
        for idx, name in enumerate(data_to_update, start=1)
    ]

    return PartialUpdate(", ".join(cols), list(data_to_update.values()))


def _fold_conditions(candidates: Tuple[Tuple[str, Any, bool], ...]) -> WhereClause:
    """
    Fold (predicate, value, binds_value) candidates into a WHERE clause.

    A candidate whose value is None is skipped and takes no placeholder.
    `{}` in a predicate is replaced with the next placeholder. Candidates
    with binds_value False contribute their predicate only.
    """
    conditions: List[str] = []
    values: List[Any] = []

    for predicate, value, binds_value in candidates:
        if value is None:
            continue
        if binds_value:
            values.append(value)
            predicate = predicate.format(f"${len(values)}")
        conditions.append(predicate)

    return WhereClause(" AND ".join(conditions), values)


def sql_for_company_filters(filters: Mapping[str, Any]) -> WhereClause:
    """
    Build the company search conditions.

    Conditions are always emitted in the order minEmployees, maxEmployees,
    name. `name` matches one arbitrary leading character followed by the
    given text and anything after it.

    The WHERE keyword is not included; see `where_sql`.

    Example:
        >>> sql_for_company_filters({"minEmployees": 2, "maxEmployees": 20, "name": "Com"})
        WhereClause(where='num_employees >= $1 AND num_employees <= $2 AND name ILIKE $3', values=[2, 20, '_Com%'])
    """
    name = filters.get("name")

    return _fold_conditions((
        ("num_employees >= {}", filters.get("minEmployees"), True),
        ("num_employees <= {}", filters.get("maxEmployees"), True),
        ("name ILIKE {}", None if name is None else f"_{name}%", True),
    ))


def sql_for_job_filters(filters: Mapping[str, Any]) -> WhereClause:
    """
    Build the job search conditions, in the order title, minSalary, hasEquity.

    `title` is a case-insensitive substring match. `hasEquity` only adds a
    condition when true, and binds nothing.
    """
    title = filters.get("title")
    has_equity = True if filters.get("hasEquity") else None

    return _fold_conditions((
        ("title ILIKE {}", None if title is None else f"%{title}%", True),
        ("salary >= {}", filters.get("minSalary"), True),
        ("CAST(equity AS NUMERIC) > 0", has_equity, False),
    ))


def where_sql(clause: str) -> str:
    """Prefix WHERE only when there is something to filter on."""
    return f"WHERE {clause}" if clause else ""

