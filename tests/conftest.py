import json
from unittest.mock import MagicMock, patch

import pytest

from remonline_client import RemOnlineClient


def make_response(payload, text=None):
    """Build a stand-in for ``requests.Response`` returning ``payload``."""
    response = MagicMock()
    response.json.return_value = payload
    response.text = text if text is not None else json.dumps(payload)
    return response


@pytest.fixture
def key_file(tmp_path):
    path = tmp_path / "apiKey.json"
    path.write_text(json.dumps({"apiKey": "KEY"}))
    return path


@pytest.fixture
def token_file(tmp_path):
    path = tmp_path / "apiToken.json"
    path.write_text(json.dumps({"token": "T1"}))
    return path


@pytest.fixture
def mock_requests():
    with patch("remonline_client.client.requests") as mocked:
        yield mocked


@pytest.fixture
def client(key_file, token_file, mock_requests):
    return RemOnlineClient(key_path=key_file, token_path=token_file)


@pytest.fixture
def respond():
    return make_response
