"""Variable resolver - renders {{name}} placeholders against a test case input.

Mismatch between template and input is expected data, not an error: unknown
placeholders are left in the output verbatim and reported, unused input keys
are reported, nothing is raised.
"""

import re
from typing import Any, Mapping

from prompteval.schemas.resolution import Resolution
from prompteval.utils.canonical import scalar_text

# {{name}} or {{ name }}. Names start with a letter/underscore; dots and dashes
# are allowed after that. Anything else between braces is literal text.
PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_.\-]*)\s*\}\}")


def _unique(names) -> list[str]:
    """Deduplicate keeping first-appearance order."""
    return list(dict.fromkeys(names))


def extract_variables(template: str) -> list[str]:
    """Placeholder names in the template, deduplicated, in order of first appearance."""
    return _unique(m.group(1) for m in PLACEHOLDER_RE.finditer(template))


def resolve(template: str, variables: Mapping[str, Any] | None) -> Resolution:
    """
    Substitute every well-formed placeholder whose name is a key of variables.
    Returns the rendered text plus missing_in_input / missing_in_template.
    """
    variables = variables or {}

    def _substitute(match: re.Match) -> str:
        name = match.group(1)
        if name in variables:
            return scalar_text(variables[name])
        return match.group(0)

    rendered = PLACEHOLDER_RE.sub(_substitute, template)
    names = extract_variables(template)
    in_template = set(names)

    return Resolution(
        rendered=rendered,
        variables=names,
        missing_in_input=[n for n in names if n not in variables],
        missing_in_template=[k for k in variables if k not in in_template],
    )
