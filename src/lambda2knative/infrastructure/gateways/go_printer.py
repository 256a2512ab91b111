"""Go printer gateway: renders a GoFile back to source text in gofmt layout."""

from lambda2knative.domain.errors import PrintError
from lambda2knative.domain.go_ast import (
    AssignStmt,
    BasicLit,
    BinaryExpr,
    BlockStmt,
    CallExpr,
    CompositeLit,
    Decl,
    ExprStmt,
    Field,
    FuncDecl,
    FuncType,
    GenericDecl,
    GoFile,
    Ident,
    IfStmt,
    ImportDecl,
    ImportSpec,
    Node,
    RawNode,
    ReturnStmt,
    SelectorExpr,
    StarExpr,
    StructType,
    TypeDecl,
    UnaryExpr,
)
from lambda2knative.domain.protocols import GoPrinterProtocol

INDENT = "\t"


class GoPrinterGateway(GoPrinterProtocol):
    """Untouched declarations are copied verbatim; rebuilt or synthesized ones are rendered."""

    def print_file(self, file: GoFile) -> str:
        parts = [file.header.rstrip()]
        parts.extend(self.render_decl(decl) for decl in file.decls)
        if file.trailer:
            parts.append(file.trailer)
        return "\n\n".join(parts) + "\n"

    def render_decl(self, decl: Decl) -> str:
        doc = getattr(decl, "doc", "")
        source = getattr(decl, "source", None)
        if source is not None:
            return doc + source
        if isinstance(decl, ImportDecl):
            return doc + self.render_imports(decl)
        if isinstance(decl, TypeDecl):
            return doc + f"type {decl.name} {self.expr(decl.type)}"
        if isinstance(decl, FuncDecl):
            return doc + self.render_func(decl)
        if isinstance(decl, GenericDecl):
            return doc + decl.source
        raise PrintError(f"cannot print declaration {type(decl).__name__}")

    # Declarations

    def render_imports(self, decl: ImportDecl) -> str:
        if not decl.specs:
            raise PrintError("cannot print an empty import declaration")
        if not decl.parenthesized and len(decl.specs) == 1:
            return "import " + self.import_spec(decl.specs[0])

        lines = ["import ("]
        group = decl.specs[0].group
        for spec in decl.specs:
            if spec.group != group:
                lines.append("")
                group = spec.group
            lines.extend(INDENT + doc for doc in spec.doc)
            lines.append(INDENT + self.import_spec(spec))
        lines.extend(INDENT + comment for comment in decl.footer)
        lines.append(")")
        return "\n".join(lines)

    @staticmethod
    def import_spec(spec: ImportSpec) -> str:
        text = f'"{spec.path}"'
        if spec.name:
            text = f"{spec.name} {text}"
        if spec.comment:
            text = f"{text} {spec.comment}"
        return text

    def render_func(self, decl: FuncDecl) -> str:
        head = "func "
        if decl.recv is not None:
            head += f"({self.field(decl.recv)}) "
        head += decl.name + self.signature(decl.type)
        if decl.body is None:
            return head
        return f"{head} {self.block(decl.body, 0)}"

    def signature(self, func_type: FuncType) -> str:
        params = ", ".join(self.field(f) for f in func_type.params)
        text = f"({params})"
        results = func_type.results
        if len(results) == 1 and not results[0].names:
            text += " " + self.expr(results[0].type)
        elif results:
            text += " (" + ", ".join(self.field(f) for f in results) + ")"
        return text

    def field(self, f: Field) -> str:
        if f.names:
            return f"{', '.join(f.names)} {self.expr(f.type)}"
        return self.expr(f.type)

    # Statements

    def block(self, block: BlockStmt, depth: int) -> str:
        if not block.stmts:
            return "{\n" + INDENT * depth + "}"
        inner = INDENT * (depth + 1)
        lines = [inner + self.stmt(s, depth + 1) for s in block.stmts]
        return "{\n" + "\n".join(lines) + "\n" + INDENT * depth + "}"

    def stmt(self, node: Node, depth: int) -> str:
        if isinstance(node, AssignStmt):
            lhs = ", ".join(self.expr(x) for x in node.lhs)
            rhs = ", ".join(self.expr(x) for x in node.rhs)
            return f"{lhs} {node.tok} {rhs}"
        if isinstance(node, ExprStmt):
            return self.expr(node.x)
        if isinstance(node, IfStmt):
            return f"if {self.expr(node.cond)} {self.block(node.body, depth)}"
        if isinstance(node, ReturnStmt):
            if not node.results:
                return "return"
            return "return " + ", ".join(self.expr(x) for x in node.results)
        if isinstance(node, BlockStmt):
            return self.block(node, depth)
        if isinstance(node, RawNode):
            return node.text
        raise PrintError(f"cannot print statement {type(node).__name__}")

    # Expressions

    def expr(self, node: Node) -> str:
        if isinstance(node, Ident):
            return node.name
        if isinstance(node, SelectorExpr):
            return f"{self.expr(node.x)}.{node.sel}"
        if isinstance(node, StarExpr):
            return "*" + self.expr(node.x)
        if isinstance(node, CallExpr):
            return f"{self.expr(node.fun)}({', '.join(self.expr(a) for a in node.args)})"
        if isinstance(node, BasicLit):
            return node.value
        if isinstance(node, BinaryExpr):
            return f"{self.expr(node.x)} {node.op} {self.expr(node.y)}"
        if isinstance(node, UnaryExpr):
            return node.op + self.expr(node.x)
        if isinstance(node, CompositeLit):
            return f"{self.expr(node.type)}{{{', '.join(self.expr(e) for e in node.elts)}}}"
        if isinstance(node, StructType):
            return self.struct(node)
        if isinstance(node, RawNode):
            return node.text
        raise PrintError(f"cannot print expression {type(node).__name__}")

    def struct(self, node: StructType) -> str:
        if not node.fields:
            return "struct{}"
        lines = [INDENT + self.field(f) for f in node.fields]
        return "struct {\n" + "\n".join(lines) + "\n}"
