import csv
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .normalize import applicant_email, applicant_name, applicant_phone, parse_datetime, resume_path

CSV_HEADERS = [
    ("Job Title", "job.title"),
    ("Spa Name", "spa.name"),
    ("Full Name", "candidate.fullName"),
    ("Email", "candidate.email"),
    ("Phone", "candidate.phone"),
    ("Resume", "resume"),
    ("Cover Letter", "coverLetter"),
    ("Status", "status"),
    ("Applied At", "appliedAt"),
]


def application_rows(applications: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    rows = []
    for app in applications:
        job = app.get("job") if isinstance(app.get("job"), dict) else {}
        spa = job.get("spa") if isinstance(job.get("spa"), dict) else {}
        applied = parse_datetime(app.get("appliedAt"))
        rows.append({
            "job.title": job.get("title") or "",
            "spa.name": spa.get("name") or "",
            "candidate.fullName": applicant_name(app),
            "candidate.email": applicant_email(app),
            "candidate.phone": applicant_phone(app),
            "resume": "Available" if resume_path(app) else "No Resume",
            "coverLetter": app.get("coverLetter") or "No Cover Letter",
            "status": app.get("status") or "",
            "appliedAt": applied.strftime("%Y-%m-%d %H:%M") if applied else "",
        })
    return rows


def write_csv(rows: List[Dict[str, str]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([label for label, _ in CSV_HEADERS])
        for row in rows:
            writer.writerow([row.get(key, "") for _, key in CSV_HEADERS])
