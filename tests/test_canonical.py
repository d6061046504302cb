"""Unit tests for canonical JSON and hashing."""

from prompteval.utils.canonical import canonical_json, request_hash, scalar_text


def test_canonical_json_sorts_keys():
    """Canonical JSON sorts keys."""
    obj = {"b": 1, "a": 2}
    assert canonical_json(obj) == '{"a":2,"b":1}'


def test_canonical_json_keeps_unicode():
    """Non-ASCII text is not escaped."""
    assert canonical_json({"name": "Zoë"}) == '{"name":"Zoë"}'


def test_request_hash_deterministic():
    """Request hash is deterministic."""
    h1 = request_hash("Hi John", "gpt-4o-mini")
    h2 = request_hash("Hi John", "gpt-4o-mini")
    assert h1 == h2
    assert len(h1) == 64  # SHA256 hex


def test_request_hash_depends_on_prompt_and_model():
    """Changing either half of the request changes the hash."""
    base = request_hash("Hi John", "gpt-4o-mini")
    assert request_hash("Hi Jane", "gpt-4o-mini") != base
    assert request_hash("Hi John", "claude-3-5-haiku") != base


def test_scalar_text():
    """Strings verbatim, other scalars as JSON."""
    assert scalar_text("plain") == "plain"
    assert scalar_text(3) == "3"
    assert scalar_text(0.5) == "0.5"
    assert scalar_text(False) == "false"
