"""Unit tests for AdapterSynthesizer."""

import pytest

from lambda2knative.domain.config import MigrationConfig
from lambda2knative.domain.entities import CANONICAL_SHAPES, HandlerReference, ImportAliases, SignatureModel
from lambda2knative.domain.go_ast import (
    AssignStmt,
    CallExpr,
    ExprStmt,
    Ident,
    SelectorExpr,
    walk,
)
from lambda2knative.infrastructure.gateways.go_printer import GoPrinterGateway
from lambda2knative.use_cases.synthesize_adapter import AdapterSynthesizer

READ = "body, _ := io.ReadAll(r.Body)"
GUARD = "if err != nil {\n\t\tlog.Printf(\"Handler error: %v\", err)\n\t\tw.WriteHeader(500)\n\t\treturn\n\t}"
ENCODE = "json.NewEncoder(w).Encode(result)"

EXPECTED_BODIES = {
    "()": ["H()"],
    "() -> error": ["err := H()", GUARD],
    "() -> (out, error)": ["result, err := H()", GUARD, ENCODE],
    "(in) -> error": [READ, "err := H(body)", GUARD],
    "(in) -> (out, error)": [READ, "result, err := H(body)", GUARD, ENCODE],
    "(ctx) -> error": ["err := H(ctx)", GUARD],
    "(ctx) -> (out, error)": ["result, err := H(ctx)", GUARD, ENCODE],
    "(ctx, in) -> error": [READ, "err := H(ctx, body)", GUARD],
    "(ctx, in) -> (out, error)": [READ, "result, err := H(ctx, body)", GUARD, ENCODE],
}


class TestAdapterSynthesizer:
    """Test the generated Handler/New/Handle declarations."""

    def test_bare_handler_is_a_plain_call(self, config: MigrationConfig) -> None:
        """func() gives no bindings, no error guard and no encoding."""
        body = AdapterSynthesizer(config).dispatch_body(
            HandlerReference.local("H"), SignatureModel(), ImportAliases())
        assert body == [ExprStmt(CallExpr(fun=Ident("H")))]

    def test_result_bindings_order(self) -> None:
        bindings = AdapterSynthesizer.result_bindings(SignatureModel(has_output=True, has_error=True))
        assert bindings == (Ident("result"), Ident("err"))
        assert AdapterSynthesizer.result_bindings(SignatureModel(has_error=True)) == (Ident("err"),)

    def test_call_arguments_order(self) -> None:
        args = AdapterSynthesizer.call_arguments(SignatureModel(has_context=True, has_input=True, has_error=True))
        assert args == (Ident("ctx"), Ident("body"))

    def test_imported_handler_call_is_qualified(self, config: MigrationConfig) -> None:
        stmt = AdapterSynthesizer(config).handler_call(
            HandlerReference.imported("handlers", "Handle"), SignatureModel(has_context=True, has_error=True))
        assert isinstance(stmt, AssignStmt)
        assert stmt.rhs == (CallExpr(fun=SelectorExpr(Ident("handlers"), "Handle"), args=(Ident("ctx"),)),)

    @pytest.mark.parametrize("shape", CANONICAL_SHAPES, ids=SignatureModel.describe)
    def test_dispatch_body_per_shape(
        self, shape: SignatureModel, config: MigrationConfig, printer: GoPrinterGateway
    ) -> None:
        """Read, call, error guard and encoding appear exactly as each shape requires."""
        body = AdapterSynthesizer(config).dispatch_body(HandlerReference.local("H"), shape, ImportAliases())
        assert [printer.stmt(stmt, 1) for stmt in body] == EXPECTED_BODIES[shape.describe()]

    def test_every_shape_has_an_expected_body(self) -> None:
        assert sorted(EXPECTED_BODIES) == sorted(shape.describe() for shape in CANONICAL_SHAPES)

    def test_aliases_flow_into_generated_code(self, config: MigrationConfig) -> None:
        aliases = ImportAliases(context="stdctx", http="stdhttp", io="stdio", json="stdjson", log="stdlog")
        declarations = AdapterSynthesizer(config).synthesize(
            HandlerReference.local("H"),
            SignatureModel(has_context=True, has_input=True, has_output=True, has_error=True),
            aliases,
        )
        text = GoPrinterGateway().render_decl(declarations.dispatch_method)
        assert "ctx stdctx.Context, w stdhttp.ResponseWriter, r *stdhttp.Request" in text
        assert "stdio.ReadAll(r.Body)" in text
        assert "stdlog.Printf" in text
        assert "stdjson.NewEncoder(w).Encode(result)" in text

    def test_type_and_constructor(self, config: MigrationConfig) -> None:
        declarations = AdapterSynthesizer(config).synthesize(
            HandlerReference.local("H"), SignatureModel(), ImportAliases())
        printer = GoPrinterGateway()
        assert printer.render_decl(declarations.adapter_type) == "type Handler struct{}"
        assert printer.render_decl(declarations.constructor) == "func New() *Handler {\n\treturn &Handler{}\n}"
        assert declarations.dispatch_method.recv is not None
        assert declarations.dispatch_method.name == "Handle"

    def test_configured_names(self) -> None:
        config = MigrationConfig(adapter_type="Function", constructor="NewFunction", dispatch_method="ServeHTTP")
        declarations = AdapterSynthesizer(config).synthesize(
            HandlerReference.local("H"), SignatureModel(), ImportAliases())
        names = [node.name for node in walk(declarations.constructor) if isinstance(node, Ident)]
        assert "Function" in names
        assert declarations.constructor.name == "NewFunction"
        assert declarations.dispatch_method.name == "ServeHTTP"
