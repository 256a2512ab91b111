from dataclasses import dataclass, field
from typing import Optional

from lambda2knative.domain.go_ast import FuncDecl, TypeDecl


@dataclass(frozen=True)
class HandlerReference:
    """The handler passed to the start call.

    ``qualified_name`` is ``pkg.Func`` for an imported handler and equals
    ``simple_name`` for one declared in the same package.
    """
    simple_name: str
    qualified_name: str

    def __post_init__(self) -> None:
        if not self.simple_name or not self.qualified_name:
            raise ValueError("HandlerReference names must be non-empty")

    @classmethod
    def local(cls, name: str) -> "HandlerReference":
        return cls(simple_name=name, qualified_name=name)

    @classmethod
    def imported(cls, package: str, name: str) -> "HandlerReference":
        return cls(simple_name=name, qualified_name=f"{package}.{name}")

    @property
    def package(self) -> Optional[str]:
        """Package qualifier, or None for a same-package handler."""
        if self.qualified_name == self.simple_name:
            return None
        return self.qualified_name.rsplit(".", 1)[0]

    @property
    def is_qualified(self) -> bool:
        return self.package is not None


@dataclass(frozen=True)
class SignatureModel:
    """Calling convention of a handler: ``(context?, input?) -> (output?, error?)``."""
    has_context: bool = False
    has_input: bool = False
    has_output: bool = False
    has_error: bool = False

    @classmethod
    def canonical_shapes(cls) -> tuple["SignatureModel", ...]:
        """The nine supported handler shapes."""
        return CANONICAL_SHAPES

    @property
    def is_canonical(self) -> bool:
        return self in CANONICAL_SHAPES

    def describe(self) -> str:
        """Human readable shape, e.g. ``(ctx, in) -> (out, error)``."""
        params = [name for flag, name in ((self.has_context, "ctx"), (self.has_input, "in")) if flag]
        results = [name for flag, name in ((self.has_output, "out"), (self.has_error, "error")) if flag]
        shape = f"({', '.join(params)})"
        if len(results) == 1:
            shape += f" -> {results[0]}"
        elif results:
            shape += f" -> ({', '.join(results)})"
        return shape


CANONICAL_SHAPES: tuple[SignatureModel, ...] = (
    SignatureModel(),
    SignatureModel(has_error=True),
    SignatureModel(has_output=True, has_error=True),
    SignatureModel(has_input=True, has_error=True),
    SignatureModel(has_input=True, has_output=True, has_error=True),
    SignatureModel(has_context=True, has_error=True),
    SignatureModel(has_context=True, has_output=True, has_error=True),
    SignatureModel(has_context=True, has_input=True, has_error=True),
    SignatureModel(has_context=True, has_input=True, has_output=True, has_error=True),
)


@dataclass
class ImportRequirement:
    """State of one support module while imports are rewritten."""
    path: str
    alias: str
    required: bool
    present: bool = False


@dataclass(frozen=True)
class ImportAliases:
    """Identifiers the generated adapter uses for each support package."""
    context: str = "context"
    http: str = "http"
    io: str = "io"
    json: str = "json"
    log: str = "log"


@dataclass(frozen=True)
class AdapterDeclarationSet:
    """Adapter type, its constructor and its dispatch method, in that order."""
    adapter_type: TypeDecl
    constructor: FuncDecl
    dispatch_method: FuncDecl

    def as_list(self) -> list:
        return [self.adapter_type, self.constructor, self.dispatch_method]


@dataclass(frozen=True)
class ImportRewrite:
    """Outcome of the import rewriting step."""
    aliases: ImportAliases
    removed: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TransformResult:
    """Summary of a successful transform, returned to callers for reporting."""
    handler: HandlerReference
    signature: SignatureModel
    imports: ImportRewrite
