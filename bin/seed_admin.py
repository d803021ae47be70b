# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first admin account.

Run once after the initial migration:
    python bin/seed_admin.py

The script reads FIRST_ADMIN_NAME, FIRST_ADMIN_EMAIL and
FIRST_ADMIN_PASSWORD from the environment or etc/app.conf.  After the row
is inserted those values are no longer used by the application.

Admins can only be created this way or by promoting an existing account
through PUT /admin/users/{id}/change-role; signup never grants the role.
"""

import os
import sys

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from core.config import get_settings                          # noqa: E402
from core.errors import AppError                              # noqa: E402
from database import build_engine, build_session_factory      # noqa: E402
from users.store import IdentityStore                         # noqa: E402


def seed():
    settings = get_settings()
    if not settings.first_admin_email or not settings.first_admin_password:
        print("[seed_admin] FIRST_ADMIN_EMAIL or FIRST_ADMIN_PASSWORD not set – nothing to do.")
        return

    engine = build_engine(settings.database_url)
    db = build_session_factory(engine)()
    try:
        store = IdentityStore(db, hash_rounds=settings.password_hash_rounds)
        if store.find_by_email(settings.first_admin_email):
            print(f"[seed_admin] Admin '{settings.first_admin_email}' already exists – skipping.")
            return

        try:
            admin = store.create_user(
                name=settings.first_admin_name,
                email=settings.first_admin_email,
                password=settings.first_admin_password,
                role="admin",
                is_email_verified=True,
            )
        except AppError as exc:
            print(f"[seed_admin] Could not create admin: {exc.message} {exc.details or ''}")
            sys.exit(1)

        store.audit("create_admin", target_user_id=admin.id, detail="seed_admin.py")
        print(f"[seed_admin] Admin '{admin.email}' created successfully.")
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    seed()
