class EarleyError(Exception):
    """Base class for every error raised by earleybird."""


class GrammarError(EarleyError, ValueError):
    def __init__(self, message: str, line_number: int | None = None, line: str | None = None):
        """Initialize a GrammarError, optionally pointing at a line of grammar text."""
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message}: {line!r}"
        super().__init__(message)


class StepBudgetExceeded(EarleyError, RuntimeError):
    """Raised when a parse does more work than its step budget allows.

    The base algorithm has no termination guard for cyclic grammars, so the
    budget is the only thing that turns an endless enumeration into an error.
    """

    def __init__(self, steps: int, limit: int):
        self.steps = steps
        self.limit = limit
        super().__init__(f"step budget exhausted after {steps} steps (limit {limit})")
