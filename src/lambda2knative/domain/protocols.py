from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from lambda2knative.domain.entities import HandlerReference, SignatureModel
    from lambda2knative.domain.errors import TypeLoadFailed
    from lambda2knative.domain.go_ast import FuncDecl, GoFile


class TelemetryPort(Protocol):
    """Protocol for user-facing progress messages."""

    def step(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...


class FileSystemProtocol(Protocol):
    """Protocol for filesystem operations - abstracts Path usage."""

    def resolve_path(self, path: str) -> str:
        """Resolve and normalize a path string."""
        ...

    def read_bytes(self, path: str) -> bytes:
        """Read a whole file."""
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file."""
        ...


class GoParserProtocol(Protocol):
    """Parser collaborator: Go source bytes to a GoFile."""

    def parse(self, source: bytes, path: Optional[str] = None) -> "GoFile":
        """Parse a file, raising ParseError on syntax errors."""
        ...


class GoPrinterProtocol(Protocol):
    """Printer collaborator: GoFile back to source text."""

    def print_file(self, file: "GoFile") -> str:
        """Render a file, raising PrintError on nodes it cannot render."""
        ...


class GoPackage(Protocol):
    """Symbols of one loaded Go package, as seen by the package loader."""

    @property
    def import_path(self) -> str: ...

    @property
    def name(self) -> str: ...

    def find_function(self, name: str) -> Optional[tuple["FuncDecl", "GoFile"]]:
        """Receiver-less function ``name`` and the file declaring it."""
        ...


class LoadedPackage(Protocol):
    """Result of loading the package that contains a file."""

    @property
    def package(self) -> GoPackage: ...

    @property
    def diagnostics(self) -> list["TypeLoadFailed"]: ...

    def resolve_import(self, file: "GoFile", alias: str) -> Optional[GoPackage]:
        """Package bound to ``alias`` by the imports of ``file``."""
        ...

    def dot_imports(self, file: "GoFile") -> list[GoPackage]:
        """Packages imported into the file block of ``file`` with ``import . "path"``."""
        ...


class PackageLoaderProtocol(Protocol):
    """Type-loader collaborator used by the cross-module strategy."""

    def load(self, file: "GoFile") -> LoadedPackage:
        """Load the package containing ``file`` and the packages it imports."""
        ...


class SignatureResolver(Protocol):
    """One strategy for turning a handler reference into a SignatureModel."""

    name: str

    def resolve(self, file: "GoFile", handler: "HandlerReference") -> "SignatureModel":
        """Classify the handler, raising HandlerNotFound if this strategy cannot see it."""
        ...
