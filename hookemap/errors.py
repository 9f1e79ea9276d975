"""Exception types raised by the embedding engine and its drivers."""


class HookemapError(Exception):
    """Base class for all hookemap errors."""


class DimensionMismatchError(HookemapError, ValueError):
    """Vector operation on operands of different dimension."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Dimension mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class MissingEntityError(HookemapError, KeyError):
    """Lookup of an entity label that is not part of the embedding."""

    def __init__(self, label: str, message: str = ""):
        super().__init__(message or f"Unknown entity: {label!r}")
        self.label = label

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0])


class MalformedRecordError(HookemapError):
    """A similarity record could not be parsed."""

    def __init__(self, line: str, reason: str, line_number: int = 0):
        where = f"line {line_number}: " if line_number else ""
        super().__init__(f"{where}{reason} ({line.strip()!r})")
        self.line = line
        self.reason = reason
        self.line_number = line_number


class IngestionError(HookemapError):
    """The similarity source could not be read."""


class InvalidDimensionCountError(HookemapError):
    """Plotting requested for a dimension count other than 2 or 3."""


class ClockInconsistentError(HookemapError):
    """An entity clock disagrees with the embedding clock."""


class ConfigError(HookemapError):
    """Invalid configuration file or value."""
