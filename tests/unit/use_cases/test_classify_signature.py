"""Unit tests for handler signature classification."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import Mock

import pytest

from lambda2knative.domain.config import MigrationConfig
from lambda2knative.domain.entities import HandlerReference, SignatureModel
from lambda2knative.domain.errors import HandlerNotFound, SignatureAnalysisFailed
from lambda2knative.domain.go_ast import GoFile
from lambda2knative.infrastructure.gateways.go_package_loader import GoPackageLoader
from lambda2knative.infrastructure.gateways.tree_sitter_gateway import GoParserGateway
from lambda2knative.use_cases.classify_signature import (
    LocalSignatureResolver,
    PackageSignatureResolver,
    SignatureClassifier,
)

ParseGo = Callable[..., GoFile]
WriteGo = Callable[[str, str], Path]

CANONICAL_DECLARATIONS = [
    ("func H()", SignatureModel()),
    ("func H() error", SignatureModel(has_error=True)),
    ("func H() (string, error)", SignatureModel(has_output=True, has_error=True)),
    ("func H(in string) error", SignatureModel(has_input=True, has_error=True)),
    ("func H(in Event) (*Response, error)", SignatureModel(has_input=True, has_output=True, has_error=True)),
    ("func H(ctx context.Context) error", SignatureModel(has_context=True, has_error=True)),
    (
        "func H(ctx context.Context) (map[string]int, error)",
        SignatureModel(has_context=True, has_output=True, has_error=True),
    ),
    (
        "func H(ctx context.Context, in []byte) error",
        SignatureModel(has_context=True, has_input=True, has_error=True),
    ),
    (
        "func H(ctx context.Context, in events.APIGatewayProxyRequest) (events.APIGatewayProxyResponse, error)",
        SignatureModel(has_context=True, has_input=True, has_output=True, has_error=True),
    ),
]

INVALID_DECLARATIONS = [
    "func H(a, b string) error",
    "func H(ctx context.Context, a, b string) error",
    "func H(a string, ctx context.Context) error",
    "func H() string",
    "func H() (a, b, c int)",
    "func H(in string)",
    "func H(ctx context.Context)",
]


def _source(declaration: str) -> str:
    return f'package main\n\nimport "context"\n\n{declaration} {{\n}}\n\nfunc main() {{\n\tlambda.Start(H)\n}}\n'


class TestLocalSignatureResolver:
    """Test classification from the parsed file alone."""

    @pytest.mark.parametrize(("declaration", "expected"), CANONICAL_DECLARATIONS)
    def test_canonical_shapes(
        self, parser: GoParserGateway, config: MigrationConfig, declaration: str, expected: SignatureModel
    ) -> None:
        file = parser.parse(_source(declaration).encode())
        assert LocalSignatureResolver(config).resolve(file, HandlerReference.local("H")) == expected

    @pytest.mark.parametrize("declaration", INVALID_DECLARATIONS)
    def test_unsupported_shapes(self, parser: GoParserGateway, config: MigrationConfig, declaration: str) -> None:
        file = parser.parse(_source(declaration).encode())
        with pytest.raises(SignatureAnalysisFailed, match="handler function H has an unsupported signature"):
            LocalSignatureResolver(config).resolve(file, HandlerReference.local("H"))

    def test_aliased_context_import(self, parse_go: ParseGo, config: MigrationConfig) -> None:
        """The context qualifier is resolved through the file's imports."""
        file = parse_go("""
            package main

            import stdctx "context"

            func H(c stdctx.Context) error {
                return nil
            }
        """)
        model = LocalSignatureResolver(config).resolve(file, HandlerReference.local("H"))
        assert model == SignatureModel(has_context=True, has_error=True)

    def test_other_package_named_context_is_input(self, parse_go: ParseGo, config: MigrationConfig) -> None:
        file = parse_go("""
            package main

            import context "example.com/fake/ctx"

            func H(c context.Context) error {
                return nil
            }
        """)
        model = LocalSignatureResolver(config).resolve(file, HandlerReference.local("H"))
        assert model == SignatureModel(has_input=True, has_error=True)

    def test_qualified_handler_is_not_found_locally(self, parse_go: ParseGo, config: MigrationConfig) -> None:
        file = parse_go("""
            package main

            func main() {
            }
        """)
        with pytest.raises(HandlerNotFound, match="declared in another package"):
            LocalSignatureResolver(config).resolve(file, HandlerReference.imported("handlers", "Handle"))

    def test_missing_handler(self, parse_go: ParseGo, config: MigrationConfig) -> None:
        file = parse_go("""
            package main

            func main() {
            }
        """)
        with pytest.raises(HandlerNotFound, match="H not found"):
            LocalSignatureResolver(config).resolve(file, HandlerReference.local("H"))


class TestPackageSignatureResolver:
    """Test classification through the package loader."""

    def test_handler_in_sibling_file(
        self, write_go: WriteGo, parser: GoParserGateway, config: MigrationConfig
    ) -> None:
        write_go("go.mod", "module example.com/app\n\ngo 1.21\n")
        main_path = write_go("main.go", """
            package main

            func main() {
                lambda.Start(HandleRequest)
            }
        """)
        write_go("handler.go", """
            package main

            import "context"

            func HandleRequest(ctx context.Context, in []byte) ([]byte, error) {
                return in, nil
            }
        """)
        file = parser.parse(main_path.read_bytes(), path=str(main_path))
        resolver = PackageSignatureResolver(GoPackageLoader(parser), config)
        model = resolver.resolve(file, HandlerReference.local("HandleRequest"))
        assert model == SignatureModel(has_context=True, has_input=True, has_output=True, has_error=True)

    def test_handler_in_imported_package(
        self, write_go: WriteGo, parser: GoParserGateway, config: MigrationConfig
    ) -> None:
        write_go("go.mod", "module example.com/app\n\ngo 1.21\n")
        main_path = write_go("main.go", """
            package main

            import "example.com/app/handlers"

            func main() {
                lambda.Start(handlers.Handle)
            }
        """)
        write_go("handlers/handle.go", """
            package handlers

            import gocontext "context"

            func Handle(ctx gocontext.Context) error {
                return nil
            }
        """)
        file = parser.parse(main_path.read_bytes(), path=str(main_path))
        resolver = PackageSignatureResolver(GoPackageLoader(parser), config)
        model = resolver.resolve(file, HandlerReference.imported("handlers", "Handle"))
        assert model == SignatureModel(has_context=True, has_error=True)

    def test_handler_in_dotless_module(
        self, write_go: WriteGo, parser: GoParserGateway, config: MigrationConfig
    ) -> None:
        write_go("go.mod", "module myfunc\n")
        main_path = write_go("main.go", """
            package main

            import "myfunc/handler"

            func main() {
                lambda.Start(handler.Handle)
            }
        """)
        write_go("handler/handle.go", """
            package handler

            import "context"

            func Handle(ctx context.Context) error {
                return nil
            }
        """)
        file = parser.parse(main_path.read_bytes(), path=str(main_path))
        resolver = PackageSignatureResolver(GoPackageLoader(parser), config)
        model = resolver.resolve(file, HandlerReference.imported("handler", "Handle"))
        assert model == SignatureModel(has_context=True, has_error=True)

    @pytest.mark.parametrize(("declaration", "expected"), CANONICAL_DECLARATIONS)
    def test_agrees_with_local_lookup(
        self,
        write_go: WriteGo,
        parser: GoParserGateway,
        config: MigrationConfig,
        declaration: str,
        expected: SignatureModel,
    ) -> None:
        """Both strategies classify a same-file handler identically."""
        write_go("go.mod", "module example.com/app\n")
        main_path = write_go("main.go", _source(declaration))
        file = parser.parse(main_path.read_bytes(), path=str(main_path))
        handler = HandlerReference.local("H")
        local = LocalSignatureResolver(config).resolve(file, handler)
        package = PackageSignatureResolver(GoPackageLoader(parser), config).resolve(file, handler)
        assert local == package == expected

    def test_diagnostics_are_reported_as_warnings(
        self, write_go: WriteGo, parser: GoParserGateway, config: MigrationConfig
    ) -> None:
        write_go("go.mod", "module example.com/app\n")
        main_path = write_go("main.go", """
            package main

            import "github.com/aws/aws-lambda-go/lambda"

            func main() {
                lambda.Start(Missing)
            }
        """)
        telemetry = Mock()
        file = parser.parse(main_path.read_bytes(), path=str(main_path))
        resolver = PackageSignatureResolver(GoPackageLoader(parser), config, telemetry)
        with pytest.raises(HandlerNotFound, match="Missing not found in package or imports"):
            resolver.resolve(file, HandlerReference.local("Missing"))
        warnings = [call.args[0] for call in telemetry.warning.call_args_list]
        assert any(w.startswith("Warning: could not import github.com/aws/aws-lambda-go/lambda") for w in warnings)


class TestSignatureClassifier:
    """Test strategy ordering and fallback."""

    def test_falls_back_on_handler_not_found(self) -> None:
        first = Mock()
        first.name = "local"
        first.resolve.side_effect = HandlerNotFound("H not found")
        second = Mock()
        second.name = "package"
        second.resolve.return_value = SignatureModel(has_error=True)
        telemetry = Mock()

        classifier = SignatureClassifier([first, second], telemetry=telemetry)
        result = classifier.classify(Mock(), HandlerReference.local("H"))

        assert result == SignatureModel(has_error=True)
        telemetry.step.assert_called_once_with(
            "Handler not found by local lookup, trying package lookup...")

    def test_signature_errors_do_not_fall_through(self) -> None:
        """An unsupported signature is final even when other strategies exist."""
        first = Mock()
        first.name = "local"
        first.resolve.side_effect = SignatureAnalysisFailed("bad")
        second = Mock()
        second.name = "package"

        with pytest.raises(SignatureAnalysisFailed):
            SignatureClassifier([first, second]).classify(Mock(), HandlerReference.local("H"))
        second.resolve.assert_not_called()

    def test_last_handler_not_found_is_raised(self) -> None:
        first = Mock()
        first.name = "local"
        first.resolve.side_effect = HandlerNotFound("first")
        second = Mock()
        second.name = "package"
        second.resolve.side_effect = HandlerNotFound("second")

        with pytest.raises(HandlerNotFound, match="second"):
            SignatureClassifier([first, second]).classify(Mock(), HandlerReference.local("H"))

    def test_requires_a_strategy(self) -> None:
        with pytest.raises(ValueError, match="at least one strategy"):
            SignatureClassifier([])
