"""Unit tests for main module."""

import pytest
from fastapi.testclient import TestClient

from main import server_app

client = TestClient(server_app)


@pytest.mark.unit
def test_main_app_handles_unmapped_routes():
    """Test that the app returns 404 for unmapped routes."""
    response = client.get("/test-unmapped-route")

    assert response.status_code == 404


@pytest.mark.unit
def test_main_app_serves_health():
    response = client.get("/health")

    assert response.status_code == 200
