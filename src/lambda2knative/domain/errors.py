"""Error taxonomy for a migration run. Every error is terminal for the run."""

from typing import Optional


class MigrationError(Exception):
    """Base class for all migration failures.

    ``stage`` names the step that failed (used by the CLI to render
    "Failed to <stage>: ..."), ``symbol`` the Go identifier involved, if any.
    """

    stage: str = "migrate"

    def __init__(self, message: str, symbol: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.symbol = symbol

    def __str__(self) -> str:
        return self.message


class EntryNotFound(MigrationError):
    """The entry function (``main``) is not declared in the file."""

    stage = "find lambda handler"


class StartCallNotFound(MigrationError):
    """The entry function has no body or no start call."""

    stage = "find lambda handler"


class UnsupportedHandlerExpression(MigrationError):
    """The start call argument is neither an identifier nor a ``pkg.Name`` selector."""

    stage = "find lambda handler"


class AmbiguousStartCall(MigrationError):
    """The entry function contains more than one start call."""

    stage = "find lambda handler"


class SignatureAnalysisFailed(MigrationError):
    """The handler declaration is not one of the canonical shapes."""

    stage = "analyze handler signature"


class HandlerNotFound(MigrationError):
    """No resolution strategy could find the handler declaration."""

    stage = "analyze handler signature"


class ParseError(MigrationError):
    """The source is not valid Go."""

    stage = "parse Go file"

    def __init__(
        self,
        message: str,
        symbol: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message, symbol)
        self.line = line
        self.column = column


class TypeLoadFailed(MigrationError):
    """A non-fatal package loader diagnostic. Collected and logged, never raised by the loader."""

    stage = "load package"

    def __init__(self, message: str, symbol: Optional[str] = None, path: Optional[str] = None) -> None:
        super().__init__(message, symbol)
        self.path = path


class PrintError(MigrationError):
    """The printer met a node it cannot render."""

    stage = "print modified code"
