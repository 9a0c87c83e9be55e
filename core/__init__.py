# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains business logic:
# - models/: Pydantic schemas for data validation
# - services/: User operations on top of an injected database session
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
