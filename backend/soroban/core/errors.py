"""Error taxonomy for sequence generation.

Configuration problems fail fast. Search dead ends never leave the
generator: exhaustion is absorbed by the fallback synthesizer and a
best-effort result is flagged on the Example instead of raised.
"""


class ConfigurationError(Exception):
    """Rule configuration that cannot be honoured (e.g. both direction flags set).

    Not a ValueError, so it passes through pydantic validators unchanged.
    """


class GenerationExhausted(Exception):
    """Attempt budget used up without a validated sequence. Internal only."""

    def __init__(self, attempts: int, last_issues: list[str] | None = None):
        self.attempts = attempts
        self.last_issues = list(last_issues or [])
        super().__init__(f"no valid sequence after {attempts} attempts")


class InvariantViolation(AssertionError):
    """A register left [0,9] or a replay disagreed with arithmetic. A bug, not a runtime condition."""
