"""
List-resource controllers.

Each controller owns the client-side copy of one collection: it fetches
and normalizes records, exposes filtering and pagination over them, and
writes mutations through to the API. Failures of a fetch or a mutation
never escape the controller; they land in ``error`` as a human-readable
string and the local records are left as they were. Single-record reads
(``get``, ``profile``) raise the ApiError to the caller instead.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from . import endpoints
from .client import ApiClient, unwrap_records
from .config import DEFAULT_PAGE_SIZE, clamp_page_size
from .errors import NotFoundError, ServerError, SpadminError, ValidationError, describe
from .filters import (
    filter_applications,
    filter_jobs,
    filter_messages,
    filter_messages_by_date,
    filter_spas,
    filter_subscribers,
    filter_users,
    sort_by_name,
    sort_newest_first,
)
from .logger import StructuredLogger, get_logger
from .normalize import (
    normalize_application,
    normalize_job,
    normalize_message,
    normalize_spa,
    normalize_subscriber,
    normalize_user,
)
from .pagination import Page, Paginator, paginate, total_pages
from .schema import (
    validate_emails,
    validate_job,
    validate_reply,
    validate_spa,
    validate_status,
    validate_user,
)

Record = Dict[str, Any]


@dataclass
class FetchResult:
    records: List[Record] = field(default_factory=list)
    total: int = 0
    page_count: int = 1


def record_id(record: Record) -> Any:
    return record.get("id") if record.get("id") is not None else record.get("_id")


class ListResource:
    """Fetch, filter, paginate and mutate one API collection."""

    name = "records"
    list_path = ""
    create_path: Optional[str] = None
    normalizer: Callable[[Record], Record] = staticmethod(lambda r: r)

    def __init__(
        self,
        client: ApiClient,
        page_size: int = DEFAULT_PAGE_SIZE,
        logger: Optional[StructuredLogger] = None,
    ):
        self.client = client
        self.page_size = clamp_page_size(page_size)
        self.logger = logger or client.logger or get_logger()
        self.records: List[Record] = []
        self.error: Optional[str] = None
        self.loading = False
        self.total = 0
        self.page_count = 1
        self._last_params: Dict[str, Any] = {}

    # Hooks for subclasses

    def item_path(self, rid: str) -> str:
        raise NotImplementedError

    def delete_path(self, rid: str) -> str:
        return self.item_path(rid)

    def query(self, **params) -> Dict[str, Any]:
        return {k: v for k, v in params.items() if v is not None}

    def extract(self, body: Any) -> FetchResult:
        raw = unwrap_records(body, self.logger)
        records = self.prepare([self.normalizer(r) for r in raw if isinstance(r, dict)])
        return FetchResult(
            records=records,
            total=len(records),
            page_count=max(1, total_pages(len(records), self.page_size)),
        )

    def prepare(self, records: List[Record]) -> List[Record]:
        return records

    def filter(self, records: List[Record], **predicates) -> List[Record]:
        return records

    def validate(self, payload: Record) -> List[str]:
        return []

    # Fetch

    def fetch(self, raise_errors: bool = False, **params) -> FetchResult:
        """
        Load the collection from the API and replace the local records.

        Args:
            raise_errors: Re-raise the failure after recording it
            **params: Query parameters understood by the resource

        Returns:
            FetchResult; empty when the call failed
        """
        self.loading = True
        self.error = None
        self._last_params = dict(params)
        try:
            body = self.client.get(self.list_path, params=self.query(**params) or None)
            result = self.extract(body)
        except SpadminError as e:
            self.error = describe(e)
            self.records = []
            self.logger.error(f"Error fetching {self.name}", error=self.error)
            if raise_errors:
                raise
            return FetchResult()
        finally:
            self.loading = False

        self.records = result.records
        self.total = result.total
        self.page_count = result.page_count
        self.logger.info(f"Fetched {self.name}", count=len(result.records), total=result.total)
        return result

    def refetch(self) -> FetchResult:
        return self.fetch(**self._last_params)

    # Read side

    def filtered(self, **predicates) -> List[Record]:
        return self.filter(self.records, **predicates)

    def paginator(self, page_size: Optional[int] = None, **predicates) -> Paginator:
        return Paginator(self.filtered(**predicates), clamp_page_size(page_size or self.page_size))

    def page(self, number: int = 1, page_size: Optional[int] = None, **predicates) -> Page:
        return paginate(self.filtered(**predicates), number, clamp_page_size(page_size or self.page_size))

    def get(self, rid: str) -> Record:
        """Read one record from the API; ApiError propagates."""
        body = self.client.get(self.item_path(rid))
        if isinstance(body, dict) and "data" in body:
            body = body["data"]
        if not isinstance(body, dict):
            raise NotFoundError(f"{self.name} record {rid} not found", status=404)
        return self.normalizer(body)

    def find(self, rid: Any) -> Optional[Record]:
        for record in self.records:
            if record_id(record) == rid:
                return record
        return None

    # Mutations

    def _attempt(self, action: str, call: Callable[[], Any]) -> bool:
        try:
            call()
        except SpadminError as e:
            self.error = describe(e)
            self.logger.error(f"Failed to {action}", resource=self.name, error=self.error)
            return False
        self.error = None
        return True

    def _check(self, errors: List[str]) -> None:
        if errors:
            raise ValidationError(errors)

    def delete(self, rid: Any) -> bool:
        """Delete one record; on success drop it from the local list, keeping order."""
        ok = self._attempt("delete", lambda: self.client.delete(self.delete_path(rid)))
        if not ok:
            return False
        for index, record in enumerate(self.records):
            if record_id(record) == rid:
                del self.records[index]
                self.total = max(0, self.total - 1)
                break
        self.logger.info(f"Deleted from {self.name}", id=rid)
        return True

    def create(self, payload: Record) -> bool:
        if self.create_path is None:
            self.error = f"{self.name.capitalize()} cannot be created"
            self.logger.warning("Create not supported", resource=self.name)
            return False

        def call():
            self._check(self.validate(payload))
            self.client.post(self.create_path, payload)

        if not self._attempt("create", call):
            return False
        self.refetch()
        return True

    def update(self, rid: Any, payload: Record) -> bool:
        def call():
            if not isinstance(payload, dict) or not payload:
                raise ValidationError(["Nothing to update"])
            self.client.put(self.item_path(rid), payload)

        if not self._attempt("update", call):
            return False
        self.refetch()
        return True


class JobsResource(ListResource):
    name = "jobs"
    list_path = endpoints.JOBS
    create_path = endpoints.JOBS
    normalizer = staticmethod(normalize_job)

    def item_path(self, rid: str) -> str:
        return endpoints.job(rid)

    def filter(self, records, search="", category="all", location="all", spa="all", **_):
        return filter_jobs(records, search, category, location, spa)

    def validate(self, payload):
        return validate_job(payload)

    def stats(self) -> Any:
        return self.client.get(endpoints.JOBS_STATS)

    def categories(self) -> Any:
        return self.client.get(endpoints.CATEGORIES)


class SpasResource(ListResource):
    name = "spas"
    list_path = endpoints.SPAS_LIST
    create_path = endpoints.SPAS_CREATE
    normalizer = staticmethod(normalize_spa)

    def item_path(self, rid: str) -> str:
        return endpoints.spa(rid)

    def prepare(self, records):
        return sort_by_name(records)

    def fetch(self, raise_errors: bool = False, **params) -> FetchResult:
        result = super().fetch(raise_errors=raise_errors, **params)
        if self.error is None and not result.records:
            self.error = "No spa data found"
        return result

    def filter(self, records, search="", state="all", city="all", phone="", **_):
        return filter_spas(records, search, state, city, phone)

    def validate(self, payload):
        return validate_spa(payload)

    def get(self, rid: str) -> Record:
        """Look a spa up by id.

        The backend has no single-spa read, so the full list is fetched.
        """
        body = self.client.get(self.list_path)
        for spa in unwrap_records(body, self.logger):
            if isinstance(spa, dict) and spa.get("_id") == rid:
                return normalize_spa(spa)
        raise NotFoundError(f"Spa with ID {rid} not found", status=404)


class MessagesResource(ListResource):
    """Messages are paged on the server; filters apply to the current page."""

    name = "messages"
    list_path = endpoints.MESSAGES
    create_path = endpoints.MESSAGES
    normalizer = staticmethod(normalize_message)

    def item_path(self, rid: str) -> str:
        return endpoints.message(rid)

    def query(self, page=1, start_date=None, end_date=None, **extra):
        params = {"page": page}
        # The API only honours a complete range
        if start_date and end_date:
            params["startDate"] = str(start_date)
            params["endDate"] = str(end_date)
        params.update({k: v for k, v in extra.items() if v is not None})
        return params

    def extract(self, body):
        if not isinstance(body, dict) or not body.get("success"):
            raise ServerError("Failed to fetch messages")
        raw = body.get("data") or []
        records = sort_newest_first([normalize_message(m) for m in raw if isinstance(m, dict)])
        return FetchResult(
            records=records,
            total=body.get("total") or 0,
            page_count=body.get("pages") or 1,
        )

    def filter(self, records, search="", start=None, end=None, **_):
        return filter_messages(filter_messages_by_date(records, start, end), search)

    def reply(self, rid: str, text: str, replied_by: Optional[Dict[str, str]] = None) -> bool:
        """Send a reply, then reload the current page to pick up the reply fields."""
        replied_by = replied_by or {}

        def call():
            self._check(validate_reply(text))
            self.client.post(endpoints.message_reply(rid), {
                "replyMessage": text,
                "repliedBy": {
                    "name": replied_by.get("name") or "Admin",
                    "email": replied_by.get("email") or "",
                },
            })

        if not self._attempt("send reply", call):
            return False
        self.refetch()
        return True


class SubscribersResource(ListResource):
    name = "subscribers"
    list_path = endpoints.SUBSCRIBERS
    normalizer = staticmethod(normalize_subscriber)

    def item_path(self, rid: str) -> str:
        return endpoints.subscriber(rid)

    def prepare(self, records):
        return sort_newest_first(records)

    def filter(self, records, search="", **_):
        return filter_subscribers(records, search)

    def send_jobs_email(self, emails: List[str], subject: str, message: str, jobs: List[Record]) -> bool:
        """Mail a selection of jobs to a list of subscriber addresses."""
        def call():
            errors = validate_emails(emails)
            if not (subject or "").strip():
                errors.append("Subject is required")
            self._check(errors)
            self.client.post(endpoints.SEND_JOBS_EMAIL, {
                "emails": emails,
                "subject": subject,
                "message": message,
                "jobs": jobs,
            })

        ok = self._attempt("send jobs email", call)
        if ok:
            self.logger.info("Sent jobs email", recipients=len(emails), jobs=len(jobs))
        return ok


class ApplicationsResource(ListResource):
    name = "applications"
    list_path = endpoints.APPLICATIONS_LIST
    normalizer = staticmethod(normalize_application)

    def item_path(self, rid: str) -> str:
        return endpoints.application(rid)

    def delete_path(self, rid: str) -> str:
        return endpoints.application_delete(rid)

    def query(self, page=1, limit=None, **extra):
        params = {"page": page, "limit": limit or self.page_size}
        params.update({k: v for k, v in extra.items() if v is not None})
        return params

    def extract(self, body):
        data = body.get("data") if isinstance(body, dict) else body
        raw = data if isinstance(data, list) else []
        records = sort_newest_first([normalize_application(a) for a in raw if isinstance(a, dict)], "appliedAt")
        envelope = body if isinstance(body, dict) else {}
        return FetchResult(
            records=records,
            total=envelope.get("total") or envelope.get("totalItems") or len(records),
            page_count=envelope.get("totalPages") or 1,
        )

    def filter(self, records, job="", status="", **_):
        return sort_newest_first(filter_applications(records, job, status), "appliedAt")

    def update_status(self, rid: str, status: str) -> bool:
        """Change an application's status; the local record follows on success."""
        def call():
            self._check(validate_status(status))
            self.client.put(endpoints.application_status(rid), {"status": status.lower()})

        if not self._attempt("update status", call):
            return False
        record = self.find(rid)
        if record is not None:
            record["status"] = status.lower()
        return True


class UsersResource(ListResource):
    name = "users"
    list_path = endpoints.USERS
    create_path = endpoints.USERS_REGISTER
    normalizer = staticmethod(normalize_user)

    def item_path(self, rid: str) -> str:
        return endpoints.user(rid)

    def filter(self, records, search="", role="all", **_):
        return filter_users(records, search, role)

    def validate(self, payload):
        return validate_user(payload, require_password=True)

    def profile(self) -> Record:
        """The signed-in user's own record."""
        body = self.client.get(endpoints.USERS_PROFILE)
        if isinstance(body, dict) and "data" in body:
            body = body["data"]
        return normalize_user(body) if isinstance(body, dict) else {}

    def update_profile(self, payload: Record) -> bool:
        def call():
            self._check(validate_user(payload, partial=True))
            self.client.put(endpoints.USERS_PROFILE, payload)

        ok = self._attempt("update profile", call)
        if ok:
            self.logger.info("Updated profile", fields=sorted(payload))
        return ok


RESOURCES = {
    "jobs": JobsResource,
    "spas": SpasResource,
    "messages": MessagesResource,
    "subscribers": SubscribersResource,
    "applications": ApplicationsResource,
    "users": UsersResource,
}
