"""Fatal error types for the tag protocol session.

Every error here ends the session: the request stream carries raw
payload bytes whose boundaries are only known from the request line, so
there is no safe point to resynchronise after a failure.  Each error
class carries its own process exit code so the CLI and embedding callers
can tell the conditions apart.
"""
from __future__ import annotations


class SessionError(Exception):
    """Base class for all fatal session errors.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    """

    exit_code: int = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MalformedRequest(SessionError):
    """Raised when a request line is not a valid encoding of any request.

    Parameters
    ----------
    message:
        Description of what was wrong with the line.
    line:
        The offending line, without its terminator.
    """

    exit_code = 2

    def __init__(self, message: str, line: str) -> None:
        super().__init__(f"Malformed request: {message}")
        self.line = line


class UnknownCommand(SessionError):
    """Raised when a well-formed request names a variant this server lacks."""

    exit_code = 3

    def __init__(self, command: str) -> None:
        super().__init__(f"Unknown command {command!r}")
        self.command = command


class TruncatedPayload(SessionError):
    """Raised when the input ends before a declared payload is complete.

    Parameters
    ----------
    expected:
        The payload size declared by the request.
    received:
        How many bytes arrived before end-of-stream.
    """

    exit_code = 4

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            f"Truncated payload: expected {expected} byte(s), received {received}"
        )
        self.expected = expected
        self.received = received


class AnalyzerFailure(SessionError):
    """Raised when the analyzer fails while producing records for a file."""

    exit_code = 5

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"Analyzer failed on {filename!r}: {reason}")
        self.filename = filename
        self.reason = reason
