"""
Small tagged tree for Go source files.

Nodes are immutable; a modified node is a new node built with
``with_changes`` (the same idiom LibCST uses). Only the shapes the migrator
reads or synthesizes are modelled. Anything else read from source is kept as
a ``RawNode`` carrying its exact text and its converted children, so walks
still see nested calls and the printer can emit it unchanged.

Declarations parsed from a file carry ``source`` (their exact text) and
``doc`` (the comment lines directly above them). A declaration whose
``source`` is ``None`` was built or rebuilt in memory and is rendered by the
printer.
"""

import dataclasses
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Optional, TypeVar

_N = TypeVar("_N", bound="Node")

_MAJOR_VERSION = re.compile(r"^v[0-9]+$")
_GOPKG_VERSION = re.compile(r"\.v[0-9]+$")


@dataclass(frozen=True)
class Node:
    """Base class for every node in the tree."""

    def with_changes(self: _N, **changes: object) -> _N:
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def children(self) -> Iterator["Node"]:
        """Yield direct child nodes in field order."""
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, Node):
                        yield item


def walk(node: Node) -> Iterator[Node]:
    """Depth-first, pre-order traversal starting at ``node``."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(current.children())))


# Expressions


@dataclass(frozen=True)
class Ident(Node):
    name: str


@dataclass(frozen=True)
class SelectorExpr(Node):
    """``x.sel``. Qualified types (``context.Context``) use this node too."""

    x: Node
    sel: str


@dataclass(frozen=True)
class StarExpr(Node):
    """Pointer type ``*x`` or dereference."""

    x: Node


@dataclass(frozen=True)
class CallExpr(Node):
    fun: Node
    args: tuple[Node, ...] = ()


@dataclass(frozen=True)
class BasicLit(Node):
    kind: str  # "STRING" | "INT"
    value: str  # literal text, quotes included for strings


@dataclass(frozen=True)
class BinaryExpr(Node):
    x: Node
    op: str
    y: Node


@dataclass(frozen=True)
class UnaryExpr(Node):
    op: str
    x: Node


@dataclass(frozen=True)
class CompositeLit(Node):
    type: Node
    elts: tuple[Node, ...] = ()


@dataclass(frozen=True)
class StructType(Node):
    fields: tuple["Field", ...] = ()


@dataclass(frozen=True)
class RawNode(Node):
    """Syntax read from source that the migrator does not model."""

    kind: str
    text: str
    nodes: tuple[Node, ...] = ()


# Signatures


@dataclass(frozen=True)
class Field(Node):
    """One entry of a parameter, result or struct field list. ``names`` may be empty."""

    type: Node
    names: tuple[str, ...] = ()


@dataclass(frozen=True)
class FuncType(Node):
    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] = ()

    def param_types(self) -> list[Node]:
        """Parameter types with grouped names expanded (``a, b T`` gives two entries)."""
        return _expand(self.params)

    def result_types(self) -> list[Node]:
        """Result types with grouped names expanded."""
        return _expand(self.results)


def _expand(fields: tuple[Field, ...]) -> list[Node]:
    types: list[Node] = []
    for f in fields:
        types.extend([f.type] * max(1, len(f.names)))
    return types


# Statements


@dataclass(frozen=True)
class BlockStmt(Node):
    stmts: tuple[Node, ...] = ()


@dataclass(frozen=True)
class AssignStmt(Node):
    lhs: tuple[Node, ...]
    tok: str  # ":=" | "="
    rhs: tuple[Node, ...]


@dataclass(frozen=True)
class ExprStmt(Node):
    x: Node


@dataclass(frozen=True)
class IfStmt(Node):
    cond: Node
    body: BlockStmt


@dataclass(frozen=True)
class ReturnStmt(Node):
    results: tuple[Node, ...] = ()


# Declarations


@dataclass(frozen=True)
class Decl(Node):
    """Marker base for top-level declarations."""


@dataclass(frozen=True)
class ImportSpec(Node):
    """One import. ``group`` numbers the blank-line separated run it belongs to.

    ``doc`` holds comment lines above the spec, ``comment`` a trailing one.
    """

    path: str
    name: Optional[str] = None
    comment: Optional[str] = None
    doc: tuple[str, ...] = ()
    group: int = 0

    @property
    def alias(self) -> str:
        """Identifier the file uses for this package."""
        return self.name if self.name else default_package_name(self.path)

    @property
    def is_usable(self) -> bool:
        """Blank and dot imports do not bind a qualifier."""
        return self.name not in ("_", ".")


@dataclass(frozen=True)
class ImportDecl(Decl):
    """``footer`` holds comment lines after the last spec of a parenthesized block."""

    specs: tuple[ImportSpec, ...]
    parenthesized: bool = True
    footer: tuple[str, ...] = ()
    source: Optional[str] = None
    doc: str = ""


@dataclass(frozen=True)
class TypeDecl(Decl):
    name: str
    type: Node
    source: Optional[str] = None
    doc: str = ""


@dataclass(frozen=True)
class FuncDecl(Decl):
    name: str
    type: FuncType
    body: Optional[BlockStmt] = None
    recv: Optional[Field] = None
    source: Optional[str] = None
    doc: str = ""


@dataclass(frozen=True)
class GenericDecl(Decl):
    """Any other top-level declaration (var, const, type) kept as text."""

    kind: str
    source: str
    doc: str = ""


@dataclass
class GoFile:
    """One parsed Go file. The only mutable object of a migration run."""

    package: str
    header: str
    decls: list[Decl] = field(default_factory=list)
    trailer: str = ""
    path: Optional[str] = None

    def find_function(self, name: str) -> Optional[tuple[int, FuncDecl]]:
        """Index and declaration of the receiver-less function ``name``."""
        for index, decl in enumerate(self.decls):
            if isinstance(decl, FuncDecl) and decl.recv is None and decl.name == name:
                return index, decl
        return None

    def import_decls(self) -> list[ImportDecl]:
        return [d for d in self.decls if isinstance(d, ImportDecl)]

    def import_specs(self) -> list[ImportSpec]:
        return [spec for d in self.import_decls() for spec in d.specs]

    def imported_path(self, alias: str) -> Optional[str]:
        """Import path bound to ``alias`` in this file, if any."""
        for spec in self.import_specs():
            if spec.is_usable and spec.alias == alias:
                return spec.path
        return None


def default_package_name(path: str) -> str:
    """Best guess of the package name for an unaliased import path."""
    parts = [p for p in path.split("/") if p]
    if not parts:
        return path
    last = parts[-1]
    if _MAJOR_VERSION.match(last) and len(parts) > 1:
        last = parts[-2]
    return _GOPKG_VERSION.sub("", last)


def selector_parts(node: Node) -> Optional[tuple[str, str]]:
    """``(x, sel)`` when ``node`` is a two-part selector ``x.sel`` on a bare identifier."""
    if isinstance(node, SelectorExpr) and isinstance(node.x, Ident):
        return node.x.name, node.sel
    return None


def selector(x: str, sel: str) -> SelectorExpr:
    return SelectorExpr(Ident(x), sel)


def qualified(name: str) -> Node:
    """``pkg.Func`` becomes a selector, a bare name an identifier."""
    if "." in name:
        pkg, _, func = name.partition(".")
        return selector(pkg, func)
    return Ident(name)
