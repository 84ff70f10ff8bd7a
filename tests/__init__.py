"""
IntakeGuardian Test Suite
=========================

This package contains all tests for the IntakeGuardian reminder system.

Test Structure:
- test_tools/: Scheduling, appointment and notification tool tests
- test_actions/: Reminder dispatch and poller tests
- test_services/: Store-backed service tests
- test_api/: API endpoint tests for FastAPI routes
- conftest.py: Shared pytest fixtures

Running Tests:
    # Run all tests
    pytest

    # Run specific test module
    pytest tests/test_api/

    # Run only marked tests
    pytest -m "api"
"""

# Test configuration
TEST_DATABASE_URL = "sqlite:///:memory:"

# Common test data
SAMPLE_MEDICATIONS = [
    {"name": "Metformin", "intake_times": ["08:00", "20:00"]},
    {"name": "Lisinopril", "intake_times": ["07:45"]},
    {"name": "Atorvastatin", "intake_times": ["21:00"]},
]

__all__ = [
    "TEST_DATABASE_URL",
    "SAMPLE_MEDICATIONS",
]
