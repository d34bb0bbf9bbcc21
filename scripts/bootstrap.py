#!/usr/bin/env python3
"""
Create the first tenant, user and project, and print a secret API key for it.

    python scripts/bootstrap.py --email ops@example.com --project "Web app"
"""
import argparse
import sys
from pathlib import Path

# Add the repo root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from flagdeck.db import init_db, session_scope
from flagdeck.errors import ConflictError
from flagdeck.schemas.tenant import SignUp
from flagdeck.services.tenants import TenantService


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Bootstrap a Flagdeck tenant")
    parser.add_argument("--email", required=True, help="Email of the first user")
    parser.add_argument("--name", default="", help="Display name of the first user")
    parser.add_argument("--project", default="Default Project", help="Name of the first project")
    parser.add_argument("--no-create-schema", action="store_true",
                        help="Skip create_all (schema managed by alembic)")
    args = parser.parse_args(argv)

    if not args.no_create_schema:
        init_db()

    try:
        with session_scope() as db:
            result = TenantService.sign_up(db, SignUp(email=args.email, name=args.name, project_name=args.project))
    except ConflictError as e:
        print(f"✗ {e.message}", file=sys.stderr)
        return 1

    print(f"✓ Tenant {result.tenant_id} created (user {result.user_id}, project {result.project_id})")
    print("Secret API key (shown once):")
    print(result.full_key)
    return 0


if __name__ == "__main__":
    sys.exit(main())
