"""Unit tests for the variable resolver."""

from prompteval.engine.resolver import extract_variables, resolve


def test_partial_substitution_keeps_unknown_placeholder():
    """Unknown placeholders stay verbatim; unused input keys are reported."""
    result = resolve("Hi {{user}}, welcome to {{store}}!", {"user": "John", "extra": "ignored"})
    assert result.rendered == "Hi John, welcome to {{store}}!"
    assert result.missing_in_input == ["store"]
    assert result.missing_in_template == ["extra"]
    assert result.variables == ["user", "store"]
    assert not result.is_complete


def test_full_substitution():
    """All placeholders present."""
    result = resolve("{{greeting}}, {{name}}.", {"greeting": "Hello", "name": "Ada"})
    assert result.rendered == "Hello, Ada."
    assert result.missing_in_input == []
    assert result.missing_in_template == []
    assert result.is_complete


def test_duplicate_placeholders_get_same_value():
    """Every occurrence of a name is substituted; diagnostics are deduplicated."""
    result = resolve("{{x}} and {{x}} and {{y}} and {{y}}", {"x": "1"})
    assert result.rendered == "1 and 1 and {{y}} and {{y}}"
    assert result.missing_in_input == ["y"]
    assert result.variables == ["x", "y"]


def test_missing_in_input_first_appearance_order():
    """missing_in_input follows template order, missing_in_template follows input order."""
    result = resolve("{{c}} {{a}} {{b}} {{a}}", {"z": 1, "b": 2, "y": 3})
    assert result.missing_in_input == ["c", "a"]
    assert result.missing_in_template == ["z", "y"]


def test_inner_whitespace_is_allowed():
    """{{ name }} is the same placeholder as {{name}}."""
    result = resolve("Dear {{ name }},", {"name": "Grace"})
    assert result.rendered == "Dear Grace,"


def test_malformed_placeholders_are_literal():
    """Empty, multi-word and unterminated braces are plain text."""
    template = "a {{}} b {{two words}} c {{name"
    result = resolve(template, {"name": "x", "two": "y"})
    assert result.rendered == template
    assert result.variables == []
    assert result.missing_in_template == ["name", "two"]


def test_non_string_scalars_render_as_json():
    """Numbers and booleans render in their JSON form."""
    result = resolve("{{n}} {{f}} {{b}}", {"n": 1, "f": 2.5, "b": True})
    assert result.rendered == "1 2.5 true"


def test_empty_mapping_is_valid():
    """No input at all: nothing substituted, nothing raised."""
    result = resolve("Hello {{name}}", {})
    assert result.rendered == "Hello {{name}}"
    assert result.missing_in_input == ["name"]
    assert resolve("Hello {{name}}", None).rendered == "Hello {{name}}"


def test_template_without_placeholders():
    """Plain text passes through; every input key is unused."""
    result = resolve("Static text", {"a": "1"})
    assert result.rendered == "Static text"
    assert result.missing_in_template == ["a"]


def test_value_containing_placeholder_is_not_expanded():
    """Substituted values are not re-scanned."""
    result = resolve("{{a}}", {"a": "{{b}}", "b": "nope"})
    assert result.rendered == "{{b}}"


def test_extract_variables():
    """Names deduplicated in order of first appearance, dots and dashes allowed."""
    assert extract_variables("{{ user.name }} {{order-id}} {{user.name}} {{_x}}") == [
        "user.name",
        "order-id",
        "_x",
    ]
