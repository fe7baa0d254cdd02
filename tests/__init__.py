"""
MedTrack Test Suite
===================

This package contains all tests for the MedTrack medication adherence tracker.

Test Structure:
- test_api/: API endpoint tests for FastAPI routes
- test_services/: Service layer and analytics unit tests
- test_actions/: Reminder engine tests
- test_tools/: Sound and notification tests
- test_client/: API client and dashboard session tests
- test_scripts/: Demo seeding tests
- conftest.py: Shared pytest fixtures

Running Tests:
    # Run all tests
    pytest

    # Run specific test module
    pytest tests/test_api/

    # Run only marked tests
    pytest -m "api"
    pytest -m "unit"
"""

# Test configuration
TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_USER_EMAIL = "test.user@example.com"
TEST_USER_PASSWORD = "s3cret-pass"

# Common test data
SAMPLE_MEDICINES = [
    {"name": "Metformin", "dosage": "500mg", "frequency": "Twice a day", "reminder_time": "19:00"},
    {"name": "Lisinopril", "dosage": "10mg", "frequency": "Daily", "reminder_time": "08:00"},
    {"name": "Atorvastatin", "dosage": "20mg", "frequency": "Daily", "reminder_time": "21:00"},
]

__all__ = [
    "TEST_DATABASE_URL",
    "TEST_USER_EMAIL",
    "TEST_USER_PASSWORD",
    "SAMPLE_MEDICINES",
]
