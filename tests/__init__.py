# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the StellarWave API:
# - test_models.py: Pydantic model validation
# - test_auth.py / test_security.py: Tokens, roles, password hashing
# - test_*_service.py: Service layer with the database mocked
# - test_email_*.py: Email rendering, queueing and Celery tasks
# - test_api.py / test_health.py: Endpoints through the FastAPI TestClient
#
# Run tests with: pytest
# =============================================================================
