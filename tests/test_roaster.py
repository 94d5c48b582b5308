"""
Tests for the commentary client. The HTTP layer is always mocked.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from bugduck.commentary import DuckRoaster, get_duck_roast
from bugduck.commentary.config import FALLBACK_MESSAGES
from bugduck.mutation import BugKind

BUGS = [BugKind.OFF_BY_ONE, BugKind.HOMOGLYPH_SABOTAGE]


def _response(status=200, payload=None, ok=None):
    response = MagicMock()
    response.status_code = status
    response.ok = (200 <= status < 300) if ok is None else ok
    response.json.return_value = payload
    return response


@pytest.fixture
def roaster():
    return DuckRoaster({"api_key": "sk-test"})


def test_no_key_skips_the_network():
    with patch("bugduck.commentary.roaster.requests.post") as post:
        assert DuckRoaster().roast(BUGS) == FALLBACK_MESSAGES["no_key"]
        post.assert_not_called()


def test_local_endpoint_needs_no_key():
    roaster = DuckRoaster({"endpoint": "http://localhost:11434/v1/chat/completions"})
    payload = {"choices": [{"message": {"content": "Quack."}}]}
    with patch("bugduck.commentary.roaster.requests.post", return_value=_response(payload=payload)) as post:
        assert roaster.roast(BUGS) == "Quack."
    assert "Authorization" not in post.call_args.kwargs["headers"]


def test_lookalike_host_is_not_keyless():
    roaster = DuckRoaster({"endpoint": "https://localhost.example.com/v1"})
    with patch("bugduck.commentary.roaster.requests.post") as post:
        assert roaster.roast(BUGS) == FALLBACK_MESSAGES["no_key"]
        post.assert_not_called()


def test_success(roaster):
    payload = {"choices": [{"message": {"content": "  Enjoy debugging that.  "}}]}
    with patch("bugduck.commentary.roaster.requests.post", return_value=_response(payload=payload)) as post:
        assert roaster.roast(BUGS) == "Enjoy debugging that."

    kwargs = post.call_args.kwargs
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["timeout"] == 10
    assert kwargs["json"]["model"] == "gpt-4o-mini"


def test_prompt_names_the_bugs(roaster):
    payload = roaster.build_payload(BUGS)
    prompt = payload["messages"][0]["content"]
    assert "offByOne, homoglyphSabotage" in prompt
    assert payload["max_tokens"] == 60


def test_bad_status(roaster):
    with patch("bugduck.commentary.roaster.requests.post", return_value=_response(status=500)):
        assert roaster.roast(BUGS) == FALLBACK_MESSAGES["bad_status"]


@pytest.mark.parametrize("payload", [
    {},
    {"choices": []},
    {"choices": [{"message": {"content": "   "}}]},
    {"choices": [{"message": None}]},
    ["not", "a", "dict"],
])
def test_empty_content(roaster, payload):
    with patch("bugduck.commentary.roaster.requests.post", return_value=_response(payload=payload)):
        assert roaster.roast(BUGS) == FALLBACK_MESSAGES["empty"]


def test_invalid_json(roaster):
    response = _response()
    response.json.side_effect = ValueError("no json")
    with patch("bugduck.commentary.roaster.requests.post", return_value=response):
        assert roaster.roast(BUGS) == FALLBACK_MESSAGES["error"]


@pytest.mark.parametrize("error", [
    requests.exceptions.Timeout(),
    requests.exceptions.ConnectionError("refused"),
])
def test_transport_errors(roaster, error):
    with patch("bugduck.commentary.roaster.requests.post", side_effect=error):
        assert roaster.roast(BUGS) == FALLBACK_MESSAGES["error"]


def test_get_duck_roast_reads_env_key(monkeypatch):
    monkeypatch.setenv("BUGDUCK_LLM_API_KEY", "sk-env")
    payload = {"choices": [{"message": {"content": "Heh."}}]}
    with patch("bugduck.commentary.roaster.requests.post", return_value=_response(payload=payload)) as post:
        assert get_duck_roast(BUGS) == "Heh."
    assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer sk-env"


def test_get_duck_roast_without_key():
    with patch("bugduck.commentary.roaster.requests.post") as post:
        assert get_duck_roast(BUGS) == FALLBACK_MESSAGES["no_key"]
        post.assert_not_called()
