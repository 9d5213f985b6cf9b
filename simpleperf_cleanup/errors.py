class TraceFixError(Exception):
    """Base class for all the fatal conditions met while fixing a trace."""


class FormatError(TraceFixError):
    """The framing of the trace is invalid (magic, length prefixes)."""

    def __init__(self, message, offset):
        super().__init__(f"{message} (at offset {offset})")
        self.offset = offset


class CodecError(TraceFixError):
    """A record could not be decoded or encoded."""

    def __init__(self, message, offset=None):
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.offset = offset


class MultipleOrNoMainThreadError(TraceFixError):
    """There is not exactly one thread whose id is the process id."""


class NoMainThreadSampleError(TraceFixError):
    """The main thread has no sample in the trace."""


class EmptyCallChainError(TraceFixError):
    """The first main thread sample has no call chain to take the root from."""


class NoPriorValidSampleError(TraceFixError):
    """Broken samples need fixing before any rooted main thread sample was seen."""
