# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the TrackFlow API:
# - test_models.py: Envelope, pagination and user schema validation
# - test_passwords.py: Credential codec
# - test_tokens.py: Token issuance and verification
# - test_envelope.py: Response envelope normalizer
# - test_auth_guard.py: Bearer-token guard on protected routes
# - test_user_service.py: User business logic against SQLite
# - test_user_routes.py: End-to-end API scenarios
#
# Run tests with: poetry run pytest
# =============================================================================
