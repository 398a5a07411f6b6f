"""Integration tests for pyheatzy library.

These tests use real account credentials from .env file and make actual API calls.
They are marked with @pytest.mark.integration and skipped by default.

To run integration tests:
    pytest tests/integration -v -m integration

Environment variables required in .env:
    HEATZY_LOGIN: Account email
    HEATZY_PASSWORD: Account password
    HEATZY_API_BASE_URL: API base URL (optional, defaults to the EU cloud)
    HEATZY_TEST_DEVICE_ID: Device to read (optional, defaults to the first bound device)
"""
