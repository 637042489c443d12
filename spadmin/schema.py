import re
from typing import Any, Dict, List
from urllib.parse import urlparse

APPLICATION_STATUSES = ["pending", "shortlisted", "rejected", "hired"]

JOB_REQUIRED_FIELDS = ["title", "category", "experience", "location", "city", "state"]
JOB_OPTIONAL_STR_FIELDS = ["description", "requirements", "gender", "hrPhone", "hrWhatsapp"]

SPA_REQUIRED_FIELDS = ["name", "phone", "email", "openingHours", "closingHours"]
SPA_ADDRESS_FIELDS = ["street", "city", "district", "state", "pincode"]

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PINCODE_RE = re.compile(r"^[0-9]{6}$")


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _valid_url(v: str) -> bool:
    p = urlparse(v)
    return bool(p.scheme and p.netloc)


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and bool(EMAIL_RE.match(email))


def is_valid_phone(phone: Any) -> bool:
    if not isinstance(phone, str):
        return False
    digits = re.sub(r"\D", "", phone)
    return 10 <= len(digits) <= 15


def is_valid_password(password: Any) -> bool:
    return isinstance(password, str) and len(password) >= 6


def _required(data: Dict[str, Any], fields: List[str], errors: List[str], prefix: str = "") -> None:
    for f in fields:
        name = f"{prefix}{f}"
        if f not in data:
            errors.append(f"Missing required field: {name}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{name}' must be a non-empty string")


def validate_job(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a job payload.
    Empty list means valid.
    """
    errors: List[str] = []
    _required(data, JOB_REQUIRED_FIELDS, errors)

    for f in JOB_OPTIONAL_STR_FIELDS:
        if f in data and data[f] is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    spa = data.get("spa")
    if not (_is_non_empty_str(spa) or (isinstance(spa, dict) and spa.get("_id"))):
        errors.append("Missing required field: spa")

    salary = data.get("salary")
    if salary in (None, ""):
        errors.append("Missing required field: salary")
    elif isinstance(salary, bool) or not isinstance(salary, (int, float, str)):
        errors.append("Field 'salary' must be a number or a string")
    elif isinstance(salary, (int, float)) and salary < 0:
        errors.append("Field 'salary' must not be negative")

    vacancies = data.get("vacancies")
    if vacancies is not None and (isinstance(vacancies, bool) or not isinstance(vacancies, int) or vacancies < 0):
        errors.append("Field 'vacancies' must be a non-negative integer")

    return errors


def validate_spa(data: Dict[str, Any]) -> List[str]:
    """Returns validation errors for a spa payload; empty list means valid."""
    errors: List[str] = []
    _required(data, SPA_REQUIRED_FIELDS, errors)

    address = data.get("address")
    if not isinstance(address, dict):
        errors.append("Missing required field: address")
    else:
        _required(address, SPA_ADDRESS_FIELDS, errors, prefix="address.")
        pincode = address.get("pincode")
        if _is_non_empty_str(pincode) and not PINCODE_RE.match(pincode):
            errors.append("Field 'address.pincode' must be 6 digits")

    if _is_non_empty_str(data.get("email")) and not is_valid_email(data["email"]):
        errors.append("Field 'email' must be a valid email address")
    if _is_non_empty_str(data.get("phone")) and not is_valid_phone(data["phone"]):
        errors.append("Field 'phone' must have 10 to 15 digits")

    website = data.get("website")
    if _is_non_empty_str(website) and not _valid_url(website):
        errors.append("Field 'website' must be a valid absolute URL (scheme + host)")

    return errors


def validate_status(status: Any) -> List[str]:
    if not _is_non_empty_str(status):
        return ["Status is required"]
    if status.lower() not in APPLICATION_STATUSES:
        return [f"Status must be one of: {', '.join(APPLICATION_STATUSES)}"]
    return []


def validate_reply(text: Any) -> List[str]:
    if not _is_non_empty_str(text):
        return ["Reply message cannot be empty."]
    return []


def validate_emails(emails: Any) -> List[str]:
    if not isinstance(emails, list) or not emails:
        return ["Select at least one recipient"]
    return [f"Invalid email address: {e}" for e in emails if not is_valid_email(e)]


def validate_user(data: Dict[str, Any], partial: bool = False, require_password: bool = False) -> List[str]:
    """
    Returns validation errors for a user payload.

    With ``partial`` only the fields present are checked, which suits
    profile updates. A password is checked whenever one is given and is
    mandatory when ``require_password`` is set.
    """
    if not isinstance(data, dict) or (partial and not data):
        return ["Nothing to update"] if partial else ["User details are required"]

    errors: List[str] = []

    def wanted(f: str) -> bool:
        return not partial or f in data

    if wanted("email"):
        if not _is_non_empty_str(data.get("email")):
            errors.append("Email is required")
        elif not is_valid_email(data["email"]):
            errors.append("Please enter a valid email address")

    for f, label in (("firstname", "First name"), ("lastname", "Last name")):
        if wanted(f) and not _is_non_empty_str(data.get(f)):
            errors.append(f"{label} is required")

    if wanted("phone"):
        if not _is_non_empty_str(data.get("phone")):
            errors.append("Phone number is required")
        elif not is_valid_phone(data["phone"]):
            errors.append("Please enter a valid phone number")

    if "password" in data or require_password:
        if not data.get("password"):
            errors.append("Password is required")
        elif not is_valid_password(data["password"]):
            errors.append("Password must be at least 6 characters long")

    return errors
