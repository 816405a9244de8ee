from dataclasses import dataclass


class ArrayLayoutError(TypeError):
    """Raised when a buffer does not satisfy the layout contract of an operation."""

    def __init__(self, argument, reason):
        super().__init__(f"{argument} {reason}")
        self.argument = argument
        self.reason = reason


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking the buffers of an operation before it runs.

    `argument` and `reason` are None when every buffer is valid.
    """

    ok: bool
    argument: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls):
        return cls(ok=True)

    @classmethod
    def failure(cls, argument, reason):
        return cls(ok=False, argument=argument, reason=reason)

    def raise_for_status(self):
        if not self.ok:
            raise ArrayLayoutError(self.argument, self.reason)

    def __bool__(self):
        return self.ok
