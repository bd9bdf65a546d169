class SeqTrackError(Exception):
    """Base class for every error raised by the sample database."""


class NotFoundError(SeqTrackError, LookupError):
    """
    Raised when a referenced sample, sequencing type or file is absent
    where it is required.
    """

    def __init__(self, kind, key, context=None):
        self.kind = kind
        self.key = key
        self.context = context or {}
        message = f"{kind} not found: {key}"
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            message = f"{message} ({details})"
        super().__init__(message)


class InvalidArgumentError(SeqTrackError, ValueError):
    """Missing required field, no fields supplied, or unknown data kind."""


class ParseError(SeqTrackError, ValueError):
    """A value (file name, epoch) could not be parsed."""


class IOFailure(SeqTrackError, OSError):
    """The database or schema document could not be read or written."""
