"""
Tests for the identity existence check.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from order_service.identity import IdentityClient


@pytest.fixture
def client():
    return IdentityClient("http://users.internal/", timeout=2.5)


def _response(status_code):
    response = MagicMock()
    response.status_code = status_code
    return response


def test_existing_user(client):
    with patch("order_service.identity.requests.get", return_value=_response(200)) as get:
        assert client.exists(42, "Bearer abc") is True
    get.assert_called_once_with(
        "http://users.internal/api/users/42",
        headers={"Authorization": "Bearer abc"},
        timeout=2.5,
    )


@pytest.mark.parametrize("status_code", [401, 403, 404, 500, 503])
def test_non_success_status_means_not_found(client, status_code):
    with patch("order_service.identity.requests.get", return_value=_response(status_code)):
        assert client.exists(42, "Bearer abc") is False


@pytest.mark.parametrize("error", [requests.Timeout("slow"), requests.ConnectionError("down")])
def test_unreachable_service_means_not_found(client, error):
    with patch("order_service.identity.requests.get", side_effect=error):
        assert client.exists(42, "Bearer abc") is False
