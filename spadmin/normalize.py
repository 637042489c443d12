from datetime import date, datetime, timezone
from typing import Any, Dict, Optional


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def as_utc(dt: datetime) -> datetime:
    # Naive values are taken as UTC so they compare with API timestamps
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_date(value: Any) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return "N/A"
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def format_short_date(value: Any) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return "N/A"
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"


def format_numeric_date(value: Any) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return "N/A"
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_time(value: Any) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return "N/A"
    return dt.strftime("%I:%M %p")


def format_salary(salary: Any) -> str:
    if not salary:
        return "Not specified"
    if isinstance(salary, (int, float)) and not isinstance(salary, bool):
        if isinstance(salary, float) and salary.is_integer():
            salary = int(salary)
        return f"${salary:,}"
    return str(salary)


def category_display_name(category: Any) -> str:
    if not category:
        return "-"
    if isinstance(category, str):
        return category
    if isinstance(category, dict):
        return category.get("name") or "-"
    return "-"


def _join_place(first: Optional[str], second: Optional[str]) -> str:
    if first and second:
        return f"{first}, {second}"
    return first or second or "N/A"


def job_location(job: Optional[Dict[str, Any]]) -> str:
    if not job:
        return "N/A"
    return _join_place(job.get("location"), job.get("state"))


def spa_location(spa: Optional[Dict[str, Any]]) -> str:
    if not spa or not spa.get("address"):
        return "N/A"
    address = spa["address"]
    return _join_place(address.get("city"), address.get("state"))


def spa_display_name(spa: Optional[Dict[str, Any]]) -> str:
    if not spa:
        return "Unknown Spa"
    return spa.get("name") or "Unnamed Spa"


def format_website(website: Optional[str]) -> Optional[str]:
    if not website:
        return None
    for prefix in ("https://", "http://"):
        if website.startswith(prefix):
            return website[len(prefix):]
    return website


def _applicant(application: Dict[str, Any]) -> Dict[str, Any]:
    return application.get("candidate") or application.get("guestInfo") or {}


def applicant_name(application: Dict[str, Any]) -> str:
    applicant = _applicant(application)
    full = f"{applicant.get('firstname') or ''} {applicant.get('lastname') or ''}".strip()
    return applicant.get("fullName") or full or applicant.get("name") or "Unnamed Applicant"


def applicant_email(application: Dict[str, Any]) -> str:
    return _applicant(application).get("email") or "N/A"


def applicant_phone(application: Dict[str, Any]) -> str:
    return _applicant(application).get("phone") or "N/A"


def resume_path(application: Dict[str, Any]) -> Optional[str]:
    candidate = application.get("candidate") or {}
    return candidate.get("resume") or application.get("resume") or None


def user_display_name(user: Optional[Dict[str, Any]]) -> str:
    if not user:
        return "Unknown User"
    full = f"{user.get('firstname') or ''} {user.get('lastname') or ''}".strip()
    return user.get("fullName") or full or user.get("email") or "Unknown User"


def user_initials(user: Optional[Dict[str, Any]]) -> str:
    if not user:
        return "U"
    first = (user.get("firstname") or "")[:1]
    last = (user.get("lastname") or "")[:1]
    initials = (first + last).upper()
    if initials:
        return initials
    email = user.get("email") or ""
    return email[:1].upper() or "U"


# Record normalizers: raw API fields are kept, display fields are added.

SNIPPET_LENGTH = 100
IMPORTANT_SUBJECTS = {"jobs", "employer"}


def normalize_job(job: Dict[str, Any]) -> Dict[str, Any]:
    spa = job.get("spa") if isinstance(job.get("spa"), dict) else {}
    return {
        **job,
        "id": job.get("_id"),
        "category_name": category_display_name(job.get("category")),
        "spa_name": spa.get("name") or "",
        "location_display": job_location(job),
        "salary_display": format_salary(job.get("salary")),
        "posted": format_date(job.get("createdAt")),
    }


def normalize_spa(spa: Dict[str, Any]) -> Dict[str, Any]:
    address = spa.get("address") or {}
    return {
        **spa,
        "id": spa.get("_id"),
        "display_name": spa_display_name(spa),
        "city": address.get("city") or "",
        "state": address.get("state") or "",
        "location_display": spa_location(spa),
        "website_display": format_website(spa.get("website")),
    }


def normalize_message(msg: Dict[str, Any]) -> Dict[str, Any]:
    text = msg.get("message") or ""
    snippet = text[:SNIPPET_LENGTH] + ("..." if len(text) > SNIPPET_LENGTH else "")
    replied_at = parse_datetime(msg.get("repliedAt"))
    return {
        "id": msg.get("_id"),
        "sender": msg.get("name") or "Unknown",
        "sender_email": msg.get("email") or "",
        "subject": msg.get("subject") or "",
        "snippet": snippet,
        "full_message": text,
        "date": format_numeric_date(msg.get("createdAt")),
        "time": format_time(msg.get("createdAt")),
        "status": msg.get("status") or "unread",
        "important": msg.get("subject") in IMPORTANT_SUBJECTS,
        "location": msg.get("location") or "",
        "phone": msg.get("phone") or "",
        "reply_message": msg.get("replyMessage") or "",
        "replied_by": msg.get("repliedBy"),
        "replied_at": f"{format_numeric_date(replied_at)} {format_time(replied_at)}" if replied_at else "",
        "createdAt": msg.get("createdAt"),
    }


def normalize_subscriber(sub: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **sub,
        "id": sub.get("_id"),
        "email": sub.get("email") or "",
        "phone": sub.get("phone") or "",
        "subscribed": format_short_date(sub.get("createdAt")),
    }


def normalize_application(application: Dict[str, Any]) -> Dict[str, Any]:
    job = application.get("job") if isinstance(application.get("job"), dict) else {}
    spa = job.get("spa") if isinstance(job.get("spa"), dict) else {}
    return {
        **application,
        "id": application.get("_id"),
        "applicant_name": applicant_name(application),
        "applicant_email": applicant_email(application),
        "applicant_phone": applicant_phone(application),
        "resume_path": resume_path(application),
        "job_title": job.get("title") or "",
        "spa_name": spa.get("name") or "",
        "status": application.get("status") or "pending",
        "applied": format_date(application.get("appliedAt")),
    }


def normalize_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **user,
        "id": user.get("_id"),
        "display_name": user_display_name(user),
        "initials": user_initials(user),
    }
