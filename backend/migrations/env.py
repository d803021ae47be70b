# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Alembic environment – wires the migration engine to the application's
settings and ORM metadata.

The database URL comes from the same Settings class the app uses
(environment / etc/app.conf), so there is a single source of truth for the
connection string.
"""

import os
import sys

# ---------------------------------------------------------------------------
# Path setup – make sure ``backend/`` is importable so that
# ``from core.config import get_settings`` and model imports work.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from alembic import context  # noqa: E402

from core.config import get_settings  # noqa: E402
from database import Base, build_engine  # noqa: E402

# Import every ORM model so that Base.metadata knows about all tables.
# Without this, ``alembic revision --autogenerate`` cannot detect them.
import models.user        # noqa: F401, E402
import models.audit_log   # noqa: F401, E402

_DATABASE_URL = get_settings().database_url


def run_migrations_online():
    """Online mode (the default – uses a live DB connection)."""
    connectable = build_engine(_DATABASE_URL)
    with connectable.connect() as conn:
        context.configure(connection=conn, target_metadata=Base.metadata)
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


def run_migrations_offline():
    """Offline mode (generates SQL without a live connection)."""
    context.configure(
        url=_DATABASE_URL,
        target_metadata=Base.metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
