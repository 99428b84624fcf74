"""
Dev-only reset script for the job board.

What it does:
- Deletes stored resume files under UPLOAD_DIR (best-effort).
- Truncates applications, jobs, users with identity reset
  (TRUNCATE ... RESTART IDENTITY CASCADE on Postgres, DELETE elsewhere).
- With --seed, loads a small demo data set (3 employers, 4 employees, 6 jobs, 8 applications).

Guardrails:
- Requires ENV=dev
- Requires confirmation prompt unless --yes is passed
- Logs actions to logs/ with a timestamped file
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import sys
from typing import Iterable


# Allow `import jobboard.*` from backend/
REPO_ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = REPO_ROOT / "backend"
sys.path.insert(0, str(BACKEND_DIR))


from sqlalchemy import text  # noqa: E402

from jobboard.core.config import settings  # noqa: E402
from jobboard.core.database import SessionLocal  # noqa: E402
from jobboard.core.security import hash_password  # noqa: E402
from jobboard.models.application import Application  # noqa: E402
from jobboard.models.job import Job  # noqa: E402
from jobboard.models.user import User  # noqa: E402


TABLES_TO_TRUNCATE = [
    "applications",
    "jobs",
    "users",
]

DEMO_PASSWORD = "password123"

DEMO_EMPLOYERS = [
    ("tech.company@email.com", "Tech Solutions Inc."),
    ("marketing.agency@email.com", "Creative Marketing Agency"),
    ("finance.corp@email.com", "Global Finance Corp"),
]

DEMO_EMPLOYEES = [
    ("john.doe@email.com", "John Doe"),
    ("sarah.smith@email.com", "Sarah Smith"),
    ("mike.johnson@email.com", "Mike Johnson"),
    ("emily.wilson@email.com", "Emily Wilson"),
]

# (employer index, title, description, requirements, location, salary)
DEMO_JOBS = [
    (0, "Frontend Developer",
     "Build responsive web applications using React and modern JavaScript frameworks.",
     "3+ years of React experience, JavaScript, HTML/CSS, Git", "Remote", "$70,000 - $90,000"),
    (0, "Backend Developer",
     "Develop scalable APIs and services on databases and cloud infrastructure.",
     "SQL, REST APIs, Docker experience", "New York, NY", "$80,000 - $110,000"),
    (1, "Digital Marketing Specialist",
     "Grow client presence online through SEO, social media, and content marketing.",
     "SEO knowledge, Social media management, Analytics", "Chicago, IL", "$50,000 - $65,000"),
    (1, "Graphic Designer",
     "Create visual designs for digital and print media with our creative team.",
     "Adobe Creative Suite, UI/UX design, Portfolio required", "Remote", "$45,000 - $60,000"),
    (2, "Financial Analyst",
     "Analyze financial data, prepare reports, and support business decisions.",
     "Excel, Financial modeling, Bachelor's in Finance", "Boston, MA", "$65,000 - $85,000"),
    (2, "Data Entry Clerk",
     "Entry-level position processing and maintaining financial records.",
     "Attention to detail, Basic Excel, High school diploma", "Remote", "$35,000 - $42,000"),
]

# (job index, employee index, status)
DEMO_APPLICATIONS = [
    (0, 0, "applied"),
    (0, 1, "viewed"),
    (1, 1, "shortlisted"),
    (2, 0, "applied"),
    (2, 2, "rejected"),
    (3, 3, "accepted"),
    (4, 2, "applied"),
    (5, 3, "viewed"),
]


def utc_now_stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def log_write(fp: Path, lines: Iterable[str]) -> None:
    fp.parent.mkdir(parents=True, exist_ok=True)
    with fp.open("a", encoding="utf-8") as f:
        for line in lines:
            f.write(line.rstrip("\n") + "\n")


def iter_resume_files() -> list[Path]:
    upload_dir = Path(settings.UPLOAD_DIR)
    if not upload_dir.is_dir():
        return []
    return sorted(p for p in upload_dir.iterdir() if p.is_file() and p.name.startswith("resume-"))


def truncate_tables(db, log_path: Path) -> None:
    if db.bind.dialect.name == "postgresql":
        sql = "TRUNCATE " + ", ".join(TABLES_TO_TRUNCATE) + " RESTART IDENTITY CASCADE;"
        log_write(log_path, [f"[db] executing: {sql}"])
        db.execute(text(sql))
    else:
        for table in TABLES_TO_TRUNCATE:
            log_write(log_path, [f"[db] executing: DELETE FROM {table}"])
            db.execute(text(f"DELETE FROM {table}"))
    db.commit()


def seed_demo_data(db, log_path: Path) -> None:
    password_hash = hash_password(DEMO_PASSWORD)

    employers = [User(email=e, name=n, role="employer", password_hash=password_hash) for e, n in DEMO_EMPLOYERS]
    employees = [User(email=e, name=n, role="employee", password_hash=password_hash) for e, n in DEMO_EMPLOYEES]
    db.add_all(employers + employees)
    db.flush()

    jobs = [
        Job(
            employer_id=employers[i].id,
            title=title,
            description=description,
            requirements=requirements,
            location=location,
            salary=salary,
            is_active=True,
        )
        for i, title, description, requirements, location, salary in DEMO_JOBS
    ]
    db.add_all(jobs)
    db.flush()

    db.add_all(
        Application(job_id=jobs[j].id, employee_id=employees[e].id, status=status)
        for j, e, status in DEMO_APPLICATIONS
    )
    db.commit()
    log_write(
        log_path,
        [
            f"[seed] users={len(employers) + len(employees)} jobs={len(jobs)} applications={len(DEMO_APPLICATIONS)}",
            f"[seed] demo password for every account: {DEMO_PASSWORD!r}",
        ],
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Dev reset: resume cleanup + truncate tables (+ optional seed).")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt.")
    parser.add_argument("--seed", action="store_true", help="Load demo employers, employees, jobs and applications.")
    args = parser.parse_args()

    if (settings.ENV or "").strip().lower() != "dev":
        print(f"Refusing to run: ENV must be 'dev' (got {settings.ENV!r})")
        return 2

    log_path = REPO_ROOT / "logs" / f"reset_dev_db_{utc_now_stamp()}.log"
    log_write(log_path, [f"[start] {datetime.now(timezone.utc).isoformat()} env={settings.ENV}"])
    log_write(log_path, [f"[db] host_db={settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME} (creds redacted)"])

    if not args.yes:
        msg = (
            f"WARNING: This will DELETE resume files in {settings.UPLOAD_DIR!r} and TRUNCATE tables:\n"
            f"  {', '.join(TABLES_TO_TRUNCATE)}\n\n"
            "Type RESET to continue: "
        )
        resp = input(msg).strip()
        if resp != "RESET":
            print("Cancelled.")
            log_write(log_path, ["[cancelled] user did not confirm"])
            return 1

    deleted = 0
    delete_failed = 0

    # 1) Best-effort delete of stored resumes
    for path in iter_resume_files():
        try:
            path.unlink()
            deleted += 1
            log_write(log_path, [f"[files] deleted {path.name}"])
        except OSError as e:
            delete_failed += 1
            log_write(log_path, [f"[files] delete_failed {path.name} err={type(e).__name__}: {e}"])

    with SessionLocal() as db:
        # 2) Truncate tables
        truncate_tables(db, log_path)

        # 3) Optional demo data
        if args.seed:
            seed_demo_data(db, log_path)

    log_write(
        log_path,
        [
            f"[done] files_deleted={deleted} files_failed={delete_failed}",
            f"[done] {datetime.now(timezone.utc).isoformat()}",
        ],
    )
    print(f"Done. Log written to: {log_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
