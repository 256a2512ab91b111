"""Tree-sitter based Go parser gateway."""

import logging
from typing import Optional

import tree_sitter_go as tsgo
from tree_sitter import Language, Parser
from tree_sitter import Node as TSNode

from lambda2knative.domain.errors import ParseError
from lambda2knative.domain.go_ast import (
    BlockStmt,
    CallExpr,
    Decl,
    Field,
    FuncDecl,
    FuncType,
    GenericDecl,
    GoFile,
    Ident,
    ImportDecl,
    ImportSpec,
    Node,
    RawNode,
    SelectorExpr,
    StarExpr,
)
from lambda2knative.domain.protocols import GoParserProtocol

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tsgo.language())

_IDENTIFIERS = frozenset({"identifier", "field_identifier", "package_identifier", "type_identifier"})
_GENERIC_DECLS = frozenset({"type_declaration", "var_declaration", "const_declaration"})


class GoParserGateway(GoParserProtocol):
    """Parses Go source with tree-sitter into the migrator's GoFile tree."""

    def __init__(self) -> None:
        self._parser = Parser(GO_LANGUAGE)

    def parse(self, source: bytes, path: Optional[str] = None) -> GoFile:
        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            raise self._syntax_error(root, source, path)
        file = _FileBuilder(source, path).build(root)
        logger.debug("parsed %s: package %s, %d declarations", path or "<source>", file.package, len(file.decls))
        return file

    @staticmethod
    def _syntax_error(root: TSNode, source: bytes, path: Optional[str]) -> ParseError:
        bad = _first_error(root) or root
        line, column = bad.start_point[0] + 1, bad.start_point[1] + 1
        near = source[bad.start_byte:bad.end_byte].decode("utf-8", "replace").split("\n")[0][:40]
        what = f"missing {bad.type}" if bad.is_missing else f"syntax error near {near!r}"
        return ParseError(
            f"{path or '<source>'}:{line}:{column}: {what}", line=line, column=column)


def _first_error(node: TSNode) -> Optional[TSNode]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


class _FileBuilder:
    """Converts one tree-sitter tree. Byte offsets index ``source``; text is decoded per slice."""

    def __init__(self, source: bytes, path: Optional[str]) -> None:
        self.source = source
        self.path = path

    def text(self, node: TSNode) -> str:
        return self.slice(node.start_byte, node.end_byte)

    def slice(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")

    def build(self, root: TSNode) -> GoFile:
        package_clause = next((c for c in root.named_children if c.type == "package_clause"), None)
        if package_clause is None:
            raise ParseError(f"{self.path or '<source>'}: missing package clause")
        package = next(
            (self.text(c) for c in package_clause.named_children if c.type == "package_identifier"), "")

        # (start, end, node) per declaration; a comment on the last line of a
        # declaration extends it so it stays on that line.
        spans: list[list] = []
        header_end = package_clause.end_byte
        last_row = package_clause.end_point[0]
        for child in root.named_children:
            if child.start_byte < header_end:
                continue
            if child.type == "comment":
                if child.start_point[0] == last_row:
                    if spans:
                        spans[-1][1] = child.end_byte
                    else:
                        header_end = child.end_byte
                continue
            spans.append([child.start_byte, child.end_byte, child])
            last_row = child.end_point[0]

        decls: list[Decl] = []
        cursor = header_end
        for start, end, node in spans:
            doc = self._doc(self.slice(cursor, start))
            decls.append(self._decl(node, self.slice(start, end), doc))
            cursor = end

        return GoFile(
            package=package,
            header=self.slice(0, header_end),
            decls=decls,
            trailer=self.slice(cursor, len(self.source)).strip(),
            path=self.path,
        )

    @staticmethod
    def _doc(gap: str) -> str:
        """Comment text between two declarations, ending in the separator before the next one."""
        text = gap.strip()
        if not text:
            return ""
        tail = gap[len(gap.rstrip()):]
        return text + ("\n\n" if tail.count("\n") >= 2 else "\n")

    def _decl(self, node: TSNode, source: str, doc: str) -> Decl:
        if node.type == "import_declaration":
            return self._import_decl(node, source, doc)
        if node.type in ("function_declaration", "method_declaration"):
            return self._func_decl(node, source, doc)
        kind = node.type.replace("_declaration", "") if node.type in _GENERIC_DECLS else node.type
        return GenericDecl(kind=kind, source=source, doc=doc)

    # Imports

    def _import_decl(self, node: TSNode, source: str, doc: str) -> ImportDecl:
        spec_list = next((c for c in node.named_children if c.type == "import_spec_list"), None)
        if spec_list is None:
            specs = tuple(self._import_spec(c) for c in node.named_children if c.type == "import_spec")
            return ImportDecl(specs=specs, parenthesized=False, source=source, doc=doc)

        specs: list[ImportSpec] = []
        pending_doc: list[str] = []
        group = 0
        prev_row: Optional[int] = None
        for child in spec_list.named_children:
            row = child.start_point[0]
            if prev_row is not None and row - prev_row > 1 and (specs or pending_doc):
                group += 1
            if child.type == "comment":
                if specs and prev_row == row and specs[-1].comment is None:
                    specs[-1] = specs[-1].with_changes(comment=self.text(child))
                else:
                    pending_doc.append(self.text(child))
            elif child.type == "import_spec":
                specs.append(self._import_spec(child, group=group, doc=tuple(pending_doc)))
                pending_doc = []
            prev_row = child.end_point[0]
        return ImportDecl(
            specs=tuple(specs), parenthesized=True, footer=tuple(pending_doc), source=source, doc=doc)

    def _import_spec(self, node: TSNode, group: int = 0, doc: tuple[str, ...] = ()) -> ImportSpec:
        name_node = node.child_by_field_name("name")
        path_node = node.child_by_field_name("path")
        path = self.text(path_node).strip('"`') if path_node is not None else ""
        return ImportSpec(
            path=path,
            name=self.text(name_node) if name_node is not None else None,
            group=group,
            doc=doc,
        )

    # Functions

    def _func_decl(self, node: TSNode, source: str, doc: str) -> FuncDecl:
        name_node = node.child_by_field_name("name")
        recv: Optional[Field] = None
        receiver = node.child_by_field_name("receiver")
        if receiver is not None:
            fields = self._fields(receiver)
            recv = fields[0] if fields else Field(type=RawNode(kind="receiver", text=self.text(receiver)))

        params = node.child_by_field_name("parameters")
        result = node.child_by_field_name("result")
        if result is None:
            results: tuple[Field, ...] = ()
        elif result.type == "parameter_list":
            results = self._fields(result)
        else:
            results = (Field(type=self.convert(result)),)

        body_node = node.child_by_field_name("body")
        body = None
        if body_node is not None:
            body = BlockStmt(stmts=tuple(
                self.convert(c) for c in body_node.named_children if c.type != "comment"))

        return FuncDecl(
            name=self.text(name_node) if name_node is not None else "",
            type=FuncType(
                params=self._fields(params) if params is not None else (),
                results=results,
            ),
            body=body,
            recv=recv,
            source=source,
            doc=doc,
        )

    def _fields(self, parameter_list: TSNode) -> tuple[Field, ...]:
        fields: list[Field] = []
        for child in parameter_list.named_children:
            if child.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            type_node = child.child_by_field_name("type")
            names = tuple(self.text(n) for n in child.children_by_field_name("name"))
            if child.type == "variadic_parameter_declaration" or type_node is None:
                field_type: Node = RawNode(kind=child.type, text=self._field_type_text(child, names))
            else:
                field_type = self.convert(type_node)
            fields.append(Field(type=field_type, names=names))
        return tuple(fields)

    def _field_type_text(self, node: TSNode, names: tuple[str, ...]) -> str:
        text = self.text(node)
        for name in names:
            text = text.replace(name, "", 1)
        return text.strip(" ,")

    # Expressions, types and statements

    def convert(self, node: TSNode) -> Node:
        kind = node.type
        if kind in _IDENTIFIERS:
            return Ident(self.text(node))
        if kind == "qualified_type":
            package = node.child_by_field_name("package")
            name = node.child_by_field_name("name")
            if package is not None and name is not None:
                return SelectorExpr(x=Ident(self.text(package)), sel=self.text(name))
        if kind == "selector_expression":
            operand = node.child_by_field_name("operand")
            field = node.child_by_field_name("field")
            if operand is not None and field is not None:
                return SelectorExpr(x=self.convert(operand), sel=self.text(field))
        if kind == "pointer_type" and node.named_child_count == 1:
            return StarExpr(x=self.convert(node.named_children[0]))
        if kind == "call_expression":
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is not None:
                args = ()
                if arguments is not None:
                    args = tuple(self.convert(c) for c in arguments.named_children if c.type != "comment")
                return CallExpr(fun=self.convert(function), args=args)
        return RawNode(
            kind=kind,
            text=self.text(node),
            nodes=tuple(self.convert(c) for c in node.named_children if c.type != "comment"),
        )
