"""Configuration error hierarchy."""

from collections.abc import Iterable


class ConfigError(Exception):
    """Base exception for configuration errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigNotFoundError(ConfigError):
    """Raised when an environment or service key is not recognized.

    The set of valid keys is closed, so an unknown key is always a caller
    error and is never replaced by defaults. A missing key (``key is None``)
    is reported as required rather than unknown.
    """

    def __init__(
        self,
        key: object,
        kind: str,
        choices: Iterable[str],
        *,
        context: str | None = None,
    ) -> None:
        self.key = key
        self.kind = kind
        self.choices = tuple(choices)
        expected = f"Expected one of: {', '.join(self.choices)}"
        if key is None:
            required = f"A {kind} key is required"
            if context:
                required = f"{required} for {context}"
            super().__init__(f"{required}. {expected}")
        else:
            super().__init__(f"Unknown {kind} {key!r}. {expected}")
