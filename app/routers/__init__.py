# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - users.py: Registration, login and user listing
#
# Each router is mounted in main.py. All of them use EnvelopeRoute.
# =============================================================================

from . import health
from . import users

__all__ = [
    "health",
    "users",
]
