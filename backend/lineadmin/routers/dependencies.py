"""Dependencies for router injection.

Provides the shared lock check service and admin verification so routes can
be overridden in tests.
"""

from lineadmin.services.lock_check_service import LockCheckService
from lineadmin.services.lock_store import PostgresLockStore
from lineadmin.utils.auth import verify_admin_password

# Re-export verify_admin_password for router usage
__all__ = ["verify_admin_password", "get_lock_check_service"]

_service: LockCheckService | None = None


def get_lock_check_service() -> LockCheckService:
    """Process-wide service so the per-account locks are shared by all requests."""
    global _service
    if _service is None:
        _service = LockCheckService(PostgresLockStore())
    return _service
