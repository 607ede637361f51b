"""Error taxonomy shared by every pipeline stage."""

from __future__ import annotations


class AutoShortsError(Exception):
    """Base class for all pipeline errors."""

    kind = "AutoShortsError"


class InvalidScript(AutoShortsError):
    """The script document is malformed or names an unknown content shape."""

    kind = "InvalidScript"


class MissingField(InvalidScript):
    """A content shape is missing one or more of its required fields."""

    kind = "MissingField"

    def __init__(self, shape: str, fields: list[str]):
        self.shape = shape
        self.fields = list(fields)
        super().__init__(
            f"{shape} script is missing required fields: {', '.join(self.fields)}"
        )


class ExternalProviderError(AutoShortsError):
    """A voice, image, transcription or render collaborator failed."""

    kind = "ExternalProviderError"

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")


class MediaProcessingError(AutoShortsError):
    """An audio assembly or duration probe operation failed."""

    kind = "MediaProcessingError"

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} failed: {message}")


class ConfigurationError(AutoShortsError):
    """Required resources or credentials are missing."""

    kind = "ConfigurationError"


class Cancelled(AutoShortsError):
    """The run was cancelled by its caller before it finished."""

    kind = "Cancelled"
