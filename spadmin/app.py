import argparse
import getpass
from pathlib import Path
from typing import Any, Dict, List, Sequence

from . import __version__
from .client import ApiClient
from .config import Settings, clamp_page_size
from .dashboard import MONTH_LABELS, fetch_chart_data, fetch_stats, monthly_series
from .env import load_env
from .errors import ConfigError, SpadminError, describe
from .export import application_rows, write_csv
from .filters import filter_options
from .logger import get_logger
from .pagination import Page
from .resources import (
    ApplicationsResource,
    JobsResource,
    MessagesResource,
    SpasResource,
    SubscribersResource,
    UsersResource,
)

COLUMNS = {
    "jobs": ["id", "title", "spa_name", "category_name", "location_display", "salary_display"],
    "spas": ["id", "display_name", "location_display", "phone", "website_display"],
    "messages": ["id", "date", "time", "sender", "sender_email", "subject", "status", "snippet"],
    "subscribers": ["id", "email", "phone", "subscribed"],
    "applications": ["id", "job_title", "spa_name", "applicant_name", "applicant_email", "status", "applied"],
    "users": ["id", "display_name", "email", "phone", "role"],
}

JOB_OPTION_KEYS = {"category": "category_name", "location": "state", "spa": "spa.name"}


def build_client(args: argparse.Namespace) -> ApiClient:
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        raise SystemExit(str(e))
    if args.api_url:
        settings.api_url = args.api_url.rstrip("/")
    if args.token:
        settings.token = args.token
    logger = get_logger(level="DEBUG" if args.verbose else settings.log_level)
    try:
        client = ApiClient.from_settings(settings, logger=logger)
    except ValueError as e:
        raise SystemExit(f"Invalid API URL {settings.api_url!r}: {e}")
    args.page_size = clamp_page_size(args.page_size) if args.page_size else settings.page_size
    return client


def print_rows(rows: Sequence[Dict[str, Any]], columns: List[str]) -> None:
    if not rows:
        print("No records.")
        return
    for row in rows:
        print(" | ".join(str(row.get(c) if row.get(c) is not None else "") for c in columns))


def print_page(page: Page, columns: List[str], total: int) -> None:
    print_rows(page.items, columns)
    print(f"\nPage {page.number} of {max(1, page.total_pages)} ({total} matching)")


def _load(resource, **params):
    resource.fetch(**params)
    if resource.error and not resource.records:
        raise SystemExit(resource.error)
    return resource


def _finish(ok: bool, resource, done: str) -> None:
    if not ok:
        raise SystemExit(resource.error)
    print(done)


def _show(read, keys: List[str]) -> None:
    try:
        record = read()
    except SpadminError as e:
        raise SystemExit(describe(e))
    for key in keys:
        print(f"{key}: {record.get(key)}")


def cmd_login(args: argparse.Namespace) -> None:
    client = build_client(args)
    password = args.password or getpass.getpass("Password: ")
    credentials = {"password": password}
    if args.email:
        credentials["email"] = args.email
    if args.phone:
        credentials["phone"] = args.phone
    try:
        client.login(credentials)
    except SpadminError as e:
        raise SystemExit(describe(e))
    print("Logged in. Export the token to reuse it:")
    print(f"SPADMIN_TOKEN={client.token}")


def cmd_jobs(args: argparse.Namespace) -> None:
    jobs = JobsResource(build_client(args), page_size=args.page_size)
    if args.action == "delete":
        _finish(jobs.delete(args.id), jobs, f"Deleted job {args.id}")
        return
    if args.action == "show":
        _show(lambda: jobs.get(args.id), COLUMNS["jobs"] + ["description"])
        return
    _load(jobs)
    if args.action == "options":
        for option in filter_options(jobs.records, JOB_OPTION_KEYS[args.field]):
            print(option)
        return
    predicates = dict(search=args.search, category=args.category, location=args.location, spa=args.spa)
    page = jobs.page(args.page, **predicates)
    print_page(page, COLUMNS["jobs"], len(jobs.filtered(**predicates)))


def cmd_spas(args: argparse.Namespace) -> None:
    spas = SpasResource(build_client(args), page_size=args.page_size)
    if args.action == "delete":
        _finish(spas.delete(args.id), spas, f"Deleted spa {args.id}")
        return
    if args.action == "show":
        _show(lambda: spas.get(args.id), ["id", "display_name", "location_display", "phone", "email", "website_display"])
        return
    _load(spas)
    predicates = dict(search=args.search, state=args.state, city=args.city, phone=args.phone)
    page = spas.page(args.page, **predicates)
    print_page(page, COLUMNS["spas"], len(spas.filtered(**predicates)))


def cmd_messages(args: argparse.Namespace) -> None:
    messages = MessagesResource(build_client(args), page_size=args.page_size)
    if args.action == "delete":
        _finish(messages.delete(args.id), messages, f"Deleted message {args.id}")
        return
    if args.action == "reply":
        replied_by = {"name": args.name, "email": args.email}
        _finish(messages.reply(args.id, args.text, replied_by), messages, f"Replied to message {args.id}")
        return
    _load(messages, page=args.page, start_date=args.start, end_date=args.end)
    rows = messages.filtered(search=args.search, start=args.start, end=args.end)
    print_rows(rows, COLUMNS["messages"])
    print(f"\nPage {args.page} of {messages.page_count} ({messages.total} messages)")


def cmd_subscribers(args: argparse.Namespace) -> None:
    subscribers = SubscribersResource(build_client(args), page_size=args.page_size)
    if args.action == "delete":
        _finish(subscribers.delete(args.id), subscribers, f"Deleted subscriber {args.id}")
        return
    _load(subscribers)
    page = subscribers.page(args.page, search=args.search)
    print_page(page, COLUMNS["subscribers"], len(subscribers.filtered(search=args.search)))


def cmd_applications(args: argparse.Namespace) -> None:
    applications = ApplicationsResource(build_client(args), page_size=args.page_size)
    if args.action == "delete":
        _finish(applications.delete(args.id), applications, f"Deleted application {args.id}")
        return
    if args.action == "show":
        _show(lambda: applications.get(args.id), COLUMNS["applications"])
        return
    if args.action == "status":
        _finish(
            applications.update_status(args.id, args.status),
            applications,
            f"Application {args.id} is now {args.status.lower()}",
        )
        return
    _load(applications, page=args.page)
    rows = applications.filtered(job=args.job, status=args.status)
    if args.action == "export":
        output = Path(args.output)
        write_csv(application_rows(rows), output)
        print(f"Wrote {len(rows)} applications to {output}")
        return
    print_rows(rows, COLUMNS["applications"])
    print(f"\nPage {args.page} of {applications.page_count} ({applications.total} applications)")


def cmd_users(args: argparse.Namespace) -> None:
    users = UsersResource(build_client(args), page_size=args.page_size)
    if args.action == "delete":
        _finish(users.delete(args.id), users, f"Deleted user {args.id}")
        return
    if args.action == "show":
        _show(lambda: users.get(args.id), COLUMNS["users"])
        return
    if args.action == "profile":
        _show(users.profile, COLUMNS["users"])
        return
    _load(users)
    predicates = dict(search=args.search, role=args.role)
    page = users.page(args.page, **predicates)
    print_page(page, COLUMNS["users"], len(users.filtered(**predicates)))


def cmd_stats(args: argparse.Namespace) -> None:
    client = build_client(args)
    try:
        cards = fetch_stats(client)
    except SpadminError as e:
        raise SystemExit(describe(e))
    width = max(len(card.title) for card in cards)
    for card in cards:
        value = f"{card.value:,}" if isinstance(card.value, int) else str(card.value)
        print(f"{card.title.ljust(width)}  {value}")


def cmd_charts(args: argparse.Namespace) -> None:
    client = build_client(args)
    try:
        data = fetch_chart_data(client)
    except SpadminError as e:
        raise SystemExit(describe(e))
    for name in ("users", "jobs", "messages"):
        for year, counts in monthly_series(data[name]).items():
            cells = " ".join(f"{m}:{c}" for m, c in zip(MONTH_LABELS, counts))
            print(f"{name} {year}  {cells}")
    visits = data["visits"] if isinstance(data["visits"], list) else []
    print(f"daily visit rows: {len(visits)}")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _add_list_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--page", type=int, default=1, help="Page number (default 1)")
    p.add_argument("--search", default="", help="Case-insensitive text search")


def main(argv=None):
    load_env()
    parser = argparse.ArgumentParser(prog="spadmin", description="Admin client for the spa jobs platform")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--api-url", help="API base URL (or set SPADMIN_API_URL)")
    parser.add_argument("--token", help="Bearer token (or set SPADMIN_TOKEN)")
    parser.add_argument("--page-size", type=positive_int, help="Rows per page (or set SPADMIN_PAGE_SIZE)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging and a request summary")

    subparsers = parser.add_subparsers(dest="command")

    lgn = subparsers.add_parser("login", help="Log in as admin and print a token")
    lgn.add_argument("--email", help="Admin email")
    lgn.add_argument("--phone", help="Admin phone")
    lgn.add_argument("--password", help="Password (prompted when omitted)")
    lgn.set_defaults(func=cmd_login)

    jobs = subparsers.add_parser("jobs", help="List, show, filter or delete jobs")
    jobs.add_argument("action", nargs="?", default="list", choices=["list", "show", "delete", "options"])
    _add_list_args(jobs)
    jobs.add_argument("--category", default="all", help="Category name")
    jobs.add_argument("--location", default="all", help="State")
    jobs.add_argument("--spa", default="all", help="Spa name")
    jobs.add_argument("--field", default="category", choices=sorted(JOB_OPTION_KEYS), help="Field for 'options'")
    jobs.add_argument("--id", help="Job id for 'show' or 'delete'")
    jobs.set_defaults(func=cmd_jobs)

    spas = subparsers.add_parser("spas", help="List, show or delete spas")
    spas.add_argument("action", nargs="?", default="list", choices=["list", "show", "delete"])
    _add_list_args(spas)
    spas.add_argument("--state", default="all", help="State")
    spas.add_argument("--city", default="all", help="City")
    spas.add_argument("--phone", default="", help="Phone substring")
    spas.add_argument("--id", help="Spa id for 'show' or 'delete'")
    spas.set_defaults(func=cmd_spas)

    msgs = subparsers.add_parser("messages", help="List, reply to or delete messages")
    msgs.add_argument("action", nargs="?", default="list", choices=["list", "reply", "delete"])
    _add_list_args(msgs)
    msgs.add_argument("--start", help="Start date YYYY-MM-DD")
    msgs.add_argument("--end", help="End date YYYY-MM-DD (inclusive)")
    msgs.add_argument("--id", help="Message id for 'reply' or 'delete'")
    msgs.add_argument("--text", default="", help="Reply text")
    msgs.add_argument("--name", help="Replying admin name (default Admin)")
    msgs.add_argument("--email", help="Replying admin email")
    msgs.set_defaults(func=cmd_messages)

    subs = subparsers.add_parser("subscribers", help="List or delete subscribers")
    subs.add_argument("action", nargs="?", default="list", choices=["list", "delete"])
    _add_list_args(subs)
    subs.add_argument("--id", help="Subscriber id for 'delete'")
    subs.set_defaults(func=cmd_subscribers)

    apps = subparsers.add_parser("applications", help="List, show, export, update or delete applications")
    apps.add_argument("action", nargs="?", default="list", choices=["list", "show", "status", "export", "delete"])
    apps.add_argument("--page", type=int, default=1, help="Server page number (default 1)")
    apps.add_argument("--job", default="", help="Job title or spa name substring")
    apps.add_argument("--status", default="", help="Status filter, or the new status for 'status'")
    apps.add_argument("--id", help="Application id for 'show', 'status' or 'delete'")
    apps.add_argument("--output", default="data/applications.csv", help="CSV path for 'export'")
    apps.set_defaults(func=cmd_applications)

    usr = subparsers.add_parser("users", help="List, show or delete users")
    usr.add_argument("action", nargs="?", default="list", choices=["list", "show", "profile", "delete"])
    _add_list_args(usr)
    usr.add_argument("--role", default="all", help="Role (admin, user, spa_admin)")
    usr.add_argument("--id", help="User id for 'show' or 'delete'")
    usr.set_defaults(func=cmd_users)

    sts = subparsers.add_parser("stats", help="Show dashboard counters")
    sts.set_defaults(func=cmd_stats)

    chs = subparsers.add_parser("charts", help="Show monthly chart series")
    chs.set_defaults(func=cmd_charts)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    if getattr(args, "action", None) in ("delete", "show", "reply", "status") and not args.id:
        raise SystemExit(f"--id is required for '{args.action}'")

    try:
        args.func(args)
    finally:
        if args.verbose:
            get_logger().log_metrics_summary()


if __name__ == "__main__":
    main()
