"""
Client-side filters over fetched records.

Every filter is a linear scan returning a new list. With no active
predicate the input list is returned as-is, and applying the same
predicate twice gives the same result as applying it once.
"""

from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .normalize import as_utc, category_display_name, parse_datetime

ALL = "all"

Record = Dict[str, Any]
DateBound = Union[str, date, datetime, None]


def _contains(value: Any, term: str) -> bool:
    return isinstance(value, str) and term in value.lower()


def _nested(record: Record, *keys: str) -> Any:
    value: Any = record
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _is_all(value: Optional[str]) -> bool:
    return not value or value == ALL


def filter_jobs(
    jobs: Iterable[Record],
    search: str = "",
    category: str = ALL,
    location: str = ALL,
    spa: str = ALL,
) -> List[Record]:
    """
    Filter jobs by text search and categorical filters.

    Args:
        jobs: Job records
        search: Substring matched against job title and spa name
        category: Category display name, or "all"
        location: Exact state, or "all"
        spa: Exact spa name, or "all"
    """
    if not isinstance(jobs, list):
        return []
    if not search and _is_all(category) and _is_all(location) and _is_all(spa):
        return jobs

    term = search.lower()
    result = []
    for job in jobs:
        spa_name = _nested(job, "spa", "name")
        if term and not (_contains(job.get("title"), term) or _contains(spa_name, term)):
            continue
        if not _is_all(category) and category_display_name(job.get("category")) != category:
            continue
        if not _is_all(location) and job.get("state") != location:
            continue
        if not _is_all(spa) and spa_name != spa:
            continue
        result.append(job)
    return result


def filter_spas(
    spas: Iterable[Record],
    search: str = "",
    state: str = ALL,
    city: str = ALL,
    phone: str = "",
) -> List[Record]:
    """Filter spas by name/street search, state, city and phone substring."""
    if not isinstance(spas, list):
        return []
    if not search and _is_all(state) and _is_all(city) and not phone:
        return spas

    term = search.lower()
    result = []
    for spa in spas:
        if term and not (
            _contains(spa.get("name"), term) or _contains(_nested(spa, "address", "street"), term)
        ):
            continue
        if not _is_all(state) and _nested(spa, "address", "state") != state:
            continue
        if not _is_all(city) and _nested(spa, "address", "city") != city:
            continue
        if phone and phone not in (spa.get("phone") or ""):
            continue
        result.append(spa)
    return result


MESSAGE_SEARCH_FIELDS = ("sender", "sender_email", "subject", "snippet", "full_message")


def filter_messages(messages: Iterable[Record], search: str = "") -> List[Record]:
    """Filter normalized messages by a substring over sender, email, subject and body."""
    if not isinstance(messages, list):
        return []
    if not search:
        return messages
    term = search.lower()
    return [m for m in messages if any(_contains(m.get(f), term) for f in MESSAGE_SEARCH_FIELDS)]


def _lower_bound(value: DateBound) -> Optional[datetime]:
    dt = parse_datetime(value)
    return as_utc(dt) if dt is not None else None


def _upper_bound(value: DateBound) -> Optional[datetime]:
    # A bare date covers the whole of that day
    if isinstance(value, date) and not isinstance(value, datetime):
        return as_utc(datetime.combine(value, time.max))
    dt = parse_datetime(value)
    if dt is None:
        return None
    if isinstance(value, str) and len(value.strip()) == 10:
        dt = dt + timedelta(days=1) - timedelta(microseconds=1)
    return as_utc(dt)


def filter_by_date(
    records: Iterable[Record],
    start: DateBound = None,
    end: DateBound = None,
    field: str = "createdAt",
) -> List[Record]:
    """
    Keep records whose ``field`` falls inside the inclusive [start, end] range.

    With no bounds the input is returned unchanged. With a bound set, a
    record without a parseable date is dropped.
    """
    if not isinstance(records, list):
        return []
    if not start and not end:
        return records

    lower = _lower_bound(start) if start else None
    upper = _upper_bound(end) if end else None
    result = []
    for record in records:
        stamp = parse_datetime(record.get(field))
        if stamp is None:
            continue
        stamp = as_utc(stamp)
        if lower is not None and stamp < lower:
            continue
        if upper is not None and stamp > upper:
            continue
        result.append(record)
    return result


def filter_messages_by_date(messages: Iterable[Record], start: DateBound = None, end: DateBound = None) -> List[Record]:
    return filter_by_date(messages, start, end, field="createdAt")


def filter_subscribers(subscribers: Iterable[Record], search: str = "") -> List[Record]:
    if not isinstance(subscribers, list):
        return []
    if not search:
        return subscribers
    term = search.lower()
    return [s for s in subscribers if _contains(s.get("email"), term) or _contains(s.get("phone"), term)]


def filter_applications(applications: Iterable[Record], job: str = "", status: str = "") -> List[Record]:
    """Filter by job title or spa name substring and case-insensitive status."""
    if not isinstance(applications, list):
        return []
    if not job and not status:
        return applications

    term = job.lower()
    wanted = status.lower()
    result = []
    for app in applications:
        if not app:
            continue
        if term and not (
            _contains(_nested(app, "job", "title"), term)
            or _contains(_nested(app, "job", "spa", "name"), term)
        ):
            continue
        if wanted and (app.get("status") or "").lower() != wanted:
            continue
        result.append(app)
    return result


def filter_users(users: Iterable[Record], search: str = "", role: str = ALL) -> List[Record]:
    if not isinstance(users, list):
        return []
    if not search and _is_all(role):
        return users

    term = search.lower()
    result = []
    for user in users:
        full = f"{user.get('firstname') or ''} {user.get('lastname') or ''}"
        if term and not (
            _contains(user.get("fullName"), term)
            or _contains(user.get("email"), term)
            or _contains(user.get("phone"), term)
            or _contains(full, term)
        ):
            continue
        if not _is_all(role) and user.get("role") != role:
            continue
        result.append(user)
    return result


def filter_email_jobs(jobs: Iterable[Record], search: str = "") -> List[Record]:
    """Looser job search used when picking jobs for a subscriber email."""
    if not isinstance(jobs, list):
        return []
    if not search:
        return jobs
    term = search.lower()
    return [
        j for j in jobs
        if _contains(j.get("title"), term)
        or term in category_display_name(j.get("category")).lower()
        or _contains(j.get("location") or "", term)
        or _contains(j.get("state") or "", term)
    ]


def filter_options(records: Iterable[Record], key: Union[str, Callable[[Record], Any]]) -> List[str]:
    """Sorted unique non-empty values for a dropdown.

    ``key`` is a dotted path ("address.city") or a callable.
    """
    if not isinstance(records, list):
        return []
    if callable(key):
        getter = key
    else:
        path = key.split(".")
        getter = lambda r: _nested(r, *path)  # noqa: E731
    options = set()
    for record in records:
        value = getter(record)
        if value and value != "-":
            options.add(value)
    return sorted(options, key=lambda v: str(v).lower())


def sort_by_name(records: Iterable[Record], field: str = "name") -> List[Record]:
    if not isinstance(records, list):
        return []
    return sorted(records, key=lambda r: (r.get(field) or "").lower())


def sort_newest_first(records: Iterable[Record], field: str = "createdAt") -> List[Record]:
    if not isinstance(records, list):
        return []
    epoch = datetime(1970, 1, 1)

    def stamp(record: Record) -> datetime:
        dt = parse_datetime(record.get(field))
        return as_utc(dt if dt is not None else epoch)

    return sorted(records, key=stamp, reverse=True)
