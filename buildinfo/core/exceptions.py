class BuildInfoError(Exception):
    """Base class for all errors raised by this package.

    Attributes
    ----------
    exit_code : int
        Process exit code a command line tool should use for this error.
    """

    exit_code: int = 1

    def __init__(self, message: str, *, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidArgumentError(BuildInfoError, ValueError):
    """A reserved key or an unknown field selector was supplied."""


class NotAvailableError(BuildInfoError, LookupError):
    """Build metadata of an installed distribution could not be obtained."""


class MalformedInputError(BuildInfoError, ValueError):
    """JSON, timestamp or version input could not be parsed."""


class ExternalToolError(BuildInfoError, RuntimeError):
    """An external program (git) failed.

    The message is the program's diagnostic output when it wrote any, otherwise
    a generic description of the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        stderr: str = "",
        exit_code: int | None = None,
    ):
        super().__init__(stderr.strip() or message, exit_code=exit_code)
        self.stderr = stderr
