"""
Provision an admin account for the recruiting portal.

Self-service registration only ever creates applicants; reviewers are
created (or promoted) here.

Usage:
    python scripts/create_admin.py --email hr@example.com --name "HR Team"
    python scripts/create_admin.py --email existing@example.com --promote

Guardrails:
- Prompts for the password unless --password or --promote is passed
"""

from __future__ import annotations

import argparse
import getpass
from pathlib import Path
import sys


# Allow `import app.*` from backend/
REPO_ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = REPO_ROOT / "backend"
sys.path.insert(0, str(BACKEND_DIR))


from app.core.database import SessionLocal  # noqa: E402
from app.services.users import ensure_admin  # noqa: E402

# Register every mapped class so relationships resolve.
from app.models.job import Job  # noqa: E402,F401
from app.models.application import Application  # noqa: E402,F401
from app.models.application_note import ApplicationNote  # noqa: E402,F401
from app.models.action_log import ActionLog  # noqa: E402,F401


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an admin user or promote an existing one.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default=None)
    parser.add_argument("--password", default=None, help="Omit to be prompted.")
    parser.add_argument("--promote", action="store_true", help="Promote an existing user; keep their password.")
    args = parser.parse_args()

    password = args.password
    if password is None and not args.promote:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Confirm password: "):
            print("Passwords do not match.")
            return 1

    with SessionLocal() as db:
        try:
            user = ensure_admin(db, email=args.email, name=args.name, password=password)
        except ValueError as e:
            print(f"Refusing to create admin: {e}")
            return 2

    print(f"Admin ready: id={user.id} email={user.email}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
