"""Domain errors.

Callers can tell "your data is wrong" (these) apart from "the system is
broken" (anything else, e.g. SQLAlchemy or driver errors, which propagate
untouched).
"""


class PromptEvalError(Exception):
    """Base class for domain errors."""


class NotFound(PromptEvalError):
    """A referenced project, prompt, version or test case does not exist."""

    def __init__(self, kind: str, ident: str):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} not found: {ident}")


class ValidationError(PromptEvalError):
    """Malformed input to a mutating operation; raised before any write."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class GenerationFailed(PromptEvalError):
    """The text-generation call errored, timed out or returned nothing usable."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Generation failed: {reason}")
