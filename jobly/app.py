import argparse
import asyncio

from . import __version__
from .database import Database
from .env import get_database_url, load_env
from .exceptions import JoblyError
from .logger import get_logger
from .repositories import CompanyRepository, JobRepository


async def _run(args: argparse.Namespace, action):
    async with Database(args.database_url or get_database_url()) as db:
        return await action(db)


def _print_company(company: dict) -> None:
    print(f"Handle: {company['handle']}")
    print(f"  Name: {company['name']}")
    print(f"  Employees: {company['numEmployees']}")
    print(f"  Logo: {company['logoUrl']}")
    print(f"  Description: {company['description']}")
    print()


def cmd_init_db(args: argparse.Namespace) -> None:
    asyncio.run(_run(args, lambda db: db.init_schema()))
    print("Database initialized.")


def cmd_companies(args: argparse.Namespace) -> None:
    filters = {
        "name": args.name,
        "minEmployees": args.min_employees,
        "maxEmployees": args.max_employees,
    }
    companies = asyncio.run(_run(args, lambda db: CompanyRepository(db).find_all(filters)))
    if not companies:
        print("No companies found.")
        return
    print(f"Found {len(companies)} companies:\n")
    for company in companies:
        _print_company(company)


def cmd_company(args: argparse.Namespace) -> None:
    company = asyncio.run(_run(args, lambda db: CompanyRepository(db).get(args.handle)))
    _print_company(company)


def cmd_jobs(args: argparse.Namespace) -> None:
    filters = {
        "title": args.title,
        "minSalary": args.min_salary,
        "hasEquity": args.has_equity,
    }
    jobs = asyncio.run(_run(args, lambda db: JobRepository(db).find_all(filters)))
    if not jobs:
        print("No jobs found.")
        return
    print(f"Found {len(jobs)} jobs:\n")
    for job in jobs:
        print(f"ID: {job['id']}")
        print(f"  Title: {job['title']}")
        print(f"  Company: {job['company_handle']}")
        print(f"  Salary: {job['salary']}")
        print(f"  Equity: {job['equity']}")
        print()


def main(argv=None):
    # Load .env if present (JOBLY_DATABASE_URL, JOBLY_LOG_LEVEL, etc.)
    load_env()
    logger = get_logger()
    parser = argparse.ArgumentParser(prog="jobly", description="Jobly data layer CLI")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--database-url", help="SQLAlchemy async URL (or set JOBLY_DATABASE_URL)")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the companies and jobs tables")
    ini.set_defaults(func=cmd_init_db)

    cos = subparsers.add_parser("companies", help="List companies, optionally filtered")
    cos.add_argument("--name", help="Match companies whose name contains this after the first character")
    cos.add_argument("--min-employees", type=int, help="Minimum number of employees")
    cos.add_argument("--max-employees", type=int, help="Maximum number of employees")
    cos.set_defaults(func=cmd_companies)

    co = subparsers.add_parser("company", help="Show a single company")
    co.add_argument("handle", help="Company handle")
    co.set_defaults(func=cmd_company)

    jbs = subparsers.add_parser("jobs", help="List jobs, optionally filtered")
    jbs.add_argument("--title", help="Case-insensitive title substring")
    jbs.add_argument("--min-salary", type=int, help="Minimum salary")
    jbs.add_argument("--has-equity", action="store_true", help="Only jobs with non-zero equity")
    jbs.set_defaults(func=cmd_jobs)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            args.func(args)
        except JoblyError as e:
            raise SystemExit(e.message)
        finally:
            logger.log_metrics_summary()
        return

    parser.print_help()


if __name__ == "__main__":
    main()
