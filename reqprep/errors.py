"""reqprep errors."""


class ReqprepError(Exception):
    """Base class for all reqprep errors."""


class TemplateResolutionError(ReqprepError, ValueError):
    """A placeholder could not be resolved (unbound or expansion loop)."""

    def __init__(self, text: str, reason: str):
        super().__init__(f"{reason}: {text!r}")
        self.text = text
        self.reason = reason


class RawEntryParseError(ReqprepError, ValueError):
    """Raw ``key=value`` body text is malformed."""

    def __init__(self, line: str):
        super().__init__(f"Expected key=value, got {line!r}")
        self.line = line


class ConfigError(ReqprepError):
    """A config, request or environment file has an invalid shape."""
