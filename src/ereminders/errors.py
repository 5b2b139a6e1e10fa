"""Exception hierarchy for ereminders."""


class EremindersError(Exception):
    """Base error for ereminders."""


class ParseError(EremindersError):
    """A job descriptor could not be turned into a Job."""

    kind = "ParseError"

    def __init__(self, message: str, source_key: str | None = None):
        super().__init__(message)
        self.source_key = source_key


class MalformedFileError(ParseError):
    """Descriptor is missing the date, blank or message lines."""

    kind = "MalformedFile"


class UnresolvableDateError(ParseError):
    """The date line could not be resolved to a timestamp."""

    kind = "UnresolvableDate"


class InvalidRepeatDirectiveError(ParseError):
    """The ``repeat`` line is not ``repeat <daily|weekly|monthly>``."""

    kind = "InvalidRepeatDirective"


class WatchSourceError(EremindersError):
    """The jobs directory cannot be monitored."""


class TransportError(EremindersError):
    """Sending a reminder email failed."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class ControlChannelError(EremindersError):
    """The control socket could not be reached or answered badly."""
