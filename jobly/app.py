import argparse
import json
from typing import Any, Dict, List, Optional

from . import __version__
from .database import Store, init_database
from .env import database_url, load_env
from .errors import ApiError
from .logger import get_logger
from .models import CompanyModel, JobModel

logger = get_logger()

COMPANY_FIELD_ARGS = {
    "name": "name",
    "description": "description",
    "num_employees": "numEmployees",
    "logo_url": "logoUrl",
}
JOB_FIELD_ARGS = {
    "title": "title",
    "salary": "salary",
    "equity": "equity",
    "company_handle": "companyHandle",
}


def _fields(args: argparse.Namespace, mapping: Dict[str, str]) -> Dict[str, Any]:
    """Collect the options the user actually passed, keyed by field name."""
    data = {}
    for attr, field in mapping.items():
        value = getattr(args, attr, None)
        if value is not None:
            data[field] = value
    return data


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_init_db(args: argparse.Namespace) -> None:
    init_database(args.database_url)
    print(f"Initialized database: {args.database_url}")


def cmd_company_create(args: argparse.Namespace, store: Store) -> None:
    data = {"handle": args.handle, **_fields(args, COMPANY_FIELD_ARGS)}
    _print({"company": CompanyModel(store).create(data)})


def cmd_company_list(args: argparse.Namespace, store: Store) -> None:
    filters = {
        key: value
        for key, value in (
            ("name", args.name),
            ("minEmployees", args.min_employees),
            ("maxEmployees", args.max_employees),
        )
        if value is not None
    }
    _print({"companies": CompanyModel(store).find_all(filters)})


def cmd_company_get(args: argparse.Namespace, store: Store) -> None:
    _print({"company": CompanyModel(store).get(args.handle)})


def cmd_company_update(args: argparse.Namespace, store: Store) -> None:
    data = _fields(args, COMPANY_FIELD_ARGS)
    _print({"company": CompanyModel(store).update(args.handle, data)})


def cmd_company_remove(args: argparse.Namespace, store: Store) -> None:
    CompanyModel(store).remove(args.handle)
    _print({"deleted": args.handle})


def cmd_job_create(args: argparse.Namespace, store: Store) -> None:
    _print({"job": JobModel(store).create(_fields(args, JOB_FIELD_ARGS))})


def cmd_job_list(args: argparse.Namespace, store: Store) -> None:
    filters: Dict[str, Any] = {}
    if args.title is not None:
        filters["title"] = args.title
    if args.min_salary is not None:
        filters["minSalary"] = args.min_salary
    if args.has_equity:
        filters["hasEquity"] = True
    _print({"jobs": JobModel(store).find_all(filters)})


def cmd_job_get(args: argparse.Namespace, store: Store) -> None:
    _print({"job": JobModel(store).get(args.id)})


def cmd_job_update(args: argparse.Namespace, store: Store) -> None:
    data = _fields(args, JOB_FIELD_ARGS)
    _print({"job": JobModel(store).update(args.id, data)})


def cmd_job_remove(args: argparse.Namespace, store: Store) -> None:
    JobModel(store).remove(args.id)
    _print({"deleted": args.id})


def _add_company_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required, help="Company name")
    parser.add_argument("--description", required=required, help="Company description")
    parser.add_argument("--num-employees", type=int, help="Number of employees")
    parser.add_argument("--logo-url", help="Logo URL")


def _add_job_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--title", required=required, help="Job title")
    parser.add_argument("--salary", type=int, help="Salary")
    parser.add_argument("--equity", help="Equity as a decimal string between 0 and 1, e.g. 0.05")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobly", description="Jobly companies and jobs")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL (default: $DATABASE_URL)")

    subparsers = parser.add_subparsers(dest="command")
    init = subparsers.add_parser("init-db", help="Create the companies and jobs tables")
    init.set_defaults(func=cmd_init_db, needs_store=False)

    company = subparsers.add_parser("company", help="Manage companies")
    company_cmds = company.add_subparsers(dest="action", required=True)

    cc = company_cmds.add_parser("create", help="Create a company")
    cc.add_argument("--handle", required=True, help="Unique company handle")
    _add_company_fields(cc, required=True)
    cc.set_defaults(func=cmd_company_create)

    cl = company_cmds.add_parser("list", help="List companies, optionally filtered")
    cl.add_argument("--name", help="Case-insensitive substring of the name")
    cl.add_argument("--min-employees", type=int, help="Minimum number of employees")
    cl.add_argument("--max-employees", type=int, help="Maximum number of employees")
    cl.set_defaults(func=cmd_company_list)

    cg = company_cmds.add_parser("get", help="Show a company and its jobs")
    cg.add_argument("handle")
    cg.set_defaults(func=cmd_company_get)

    cu = company_cmds.add_parser("update", help="Update some fields of a company")
    cu.add_argument("handle")
    _add_company_fields(cu, required=False)
    cu.set_defaults(func=cmd_company_update)

    cr = company_cmds.add_parser("remove", help="Delete a company")
    cr.add_argument("handle")
    cr.set_defaults(func=cmd_company_remove)

    job = subparsers.add_parser("job", help="Manage jobs")
    job_cmds = job.add_subparsers(dest="action", required=True)

    jc = job_cmds.add_parser("create", help="Create a job")
    _add_job_fields(jc, required=True)
    jc.add_argument("--company-handle", required=True, help="Handle of the hiring company")
    jc.set_defaults(func=cmd_job_create)

    jl = job_cmds.add_parser("list", help="List jobs, optionally filtered")
    jl.add_argument("--title", help="Case-insensitive substring of the title")
    jl.add_argument("--min-salary", type=int, help="Minimum salary")
    jl.add_argument("--has-equity", action="store_true", help="Only jobs with non-zero equity")
    jl.set_defaults(func=cmd_job_list)

    jg = job_cmds.add_parser("get", help="Show a job with its company")
    jg.add_argument("id", type=int)
    jg.set_defaults(func=cmd_job_get)

    ju = job_cmds.add_parser("update", help="Update some fields of a job")
    ju.add_argument("id", type=int)
    _add_job_fields(ju, required=False)
    ju.set_defaults(func=cmd_job_update)

    jr = job_cmds.add_parser("remove", help="Delete a job")
    jr.add_argument("id", type=int)
    jr.set_defaults(func=cmd_job_remove)

    return parser


def main(argv: Optional[List[str]] = None):
    # Load .env if present (DATABASE_URL, JOBLY_LOG_LEVEL, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    if args.database_url is None:
        args.database_url = database_url()

    if not getattr(args, "needs_store", True):
        args.func(args)
        return

    store = Store.from_url(args.database_url)
    try:
        args.func(args, store)
    except ApiError as e:
        logger.record_api_error(e.kind.value)
        raise SystemExit(f"error {e.status_code}: {e.message}")
    finally:
        store.dispose()


if __name__ == "__main__":
    main()
