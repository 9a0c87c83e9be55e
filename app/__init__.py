# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App factory, middleware setup, router mounting
# - config.py: Environment variable loading and settings
# - envelope.py: Response envelope normalizer (route class + error mapping)
# - exceptions.py: Application exceptions, one per error code
# - auth/: Bearer-token guard and protected routes
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
