"""Use Case: classify the handler's calling convention.

Two strategies share one contract. The local strategy reads the declaration
straight from the parsed file; the package strategy asks the package loader
for the declaring package (same directory, imported packages) and resolves
the context parameter through the declaring file's imports. The classifier
tries them in order and only moves on when a strategy cannot see the handler.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Optional

from lambda2knative.domain.config import MigrationConfig
from lambda2knative.domain.entities import HandlerReference, SignatureModel
from lambda2knative.domain.errors import HandlerNotFound, SignatureAnalysisFailed
from lambda2knative.domain.go_ast import FuncDecl, FuncType, GoFile, Ident, Node, selector_parts
from lambda2knative.domain.protocols import (
    LoadedPackage,
    PackageLoaderProtocol,
    SignatureResolver,
    TelemetryPort,
)

logger = logging.getLogger(__name__)

TypePredicate = Callable[[Node], bool]


class SignatureRules:
    """Maps a declared parameter/result list onto one of the canonical shapes."""

    def __init__(self, config: MigrationConfig) -> None:
        self.config = config

    def is_error(self, type_node: Node) -> bool:
        return isinstance(type_node, Ident) and type_node.name == self.config.error_type

    def context_predicate(self, file: GoFile) -> TypePredicate:
        """Context check for types written in ``file``, honouring import aliases."""

        def is_context(type_node: Node) -> bool:
            parts = selector_parts(type_node)
            if parts is None or parts[1] != self.config.context_type:
                return False
            imported = file.imported_path(parts[0])
            if imported is None:
                return parts[0] == self.config.context_package
            return imported == self.config.context_package

        return is_context

    def classify(self, name: str, func_type: FuncType, is_context: TypePredicate) -> SignatureModel:
        """Return the SignatureModel for ``func_type`` or raise SignatureAnalysisFailed."""
        params = func_type.param_types()
        results = func_type.result_types()

        has_context = has_input = False
        if params:
            if is_context(params[0]):
                has_context = True
                if len(params) == 2:
                    has_input = True
                elif len(params) > 2:
                    raise self._invalid(name, f"{len(params)} parameters")
            elif len(params) == 1:
                has_input = True
            else:
                raise self._invalid(
                    name, f"{len(params)} parameters without a leading {self._context_name}")

        has_output = has_error = False
        if len(results) == 1:
            if not self.is_error(results[0]):
                raise self._invalid(name, f"single result is not {self.config.error_type}")
            has_error = True
        elif len(results) == 2:
            has_output = has_error = True
        elif len(results) > 2:
            raise self._invalid(name, f"{len(results)} results")

        model = SignatureModel(
            has_context=has_context,
            has_input=has_input,
            has_output=has_output,
            has_error=has_error,
        )
        if not model.is_canonical:
            raise self._invalid(name, f"shape {model.describe()} is not supported")
        return model

    @property
    def _context_name(self) -> str:
        return f"{self.config.context_package}.{self.config.context_type}"

    @staticmethod
    def _invalid(name: str, reason: str) -> SignatureAnalysisFailed:
        return SignatureAnalysisFailed(
            f"handler function {name} has an unsupported signature: {reason}", symbol=name)


class LocalSignatureResolver:
    """Finds the handler declaration in the already parsed file."""

    name = "local"

    def __init__(self, config: MigrationConfig) -> None:
        self.config = config
        self.rules = SignatureRules(config)

    def resolve(self, file: GoFile, handler: HandlerReference) -> SignatureModel:
        if handler.is_qualified:
            raise HandlerNotFound(
                f"handler function {handler.qualified_name} is declared in another package",
                symbol=handler.qualified_name,
            )
        found = file.find_function(handler.simple_name)
        if found is None:
            raise HandlerNotFound(
                f"handler function {handler.simple_name} not found", symbol=handler.simple_name)
        _, decl = found
        return self.rules.classify(decl.name, decl.type, self.rules.context_predicate(file))


class PackageSignatureResolver:
    """Resolves the handler through the package loader (other files and imported packages)."""

    name = "package"

    def __init__(
        self,
        loader: PackageLoaderProtocol,
        config: MigrationConfig,
        telemetry: Optional[TelemetryPort] = None,
    ) -> None:
        self.loader = loader
        self.config = config
        self.telemetry = telemetry
        self.rules = SignatureRules(config)

    def resolve(self, file: GoFile, handler: HandlerReference) -> SignatureModel:
        loaded = self.loader.load(file)
        found = self._find(loaded, file, handler)
        # imported packages load lazily, so diagnostics are complete only now
        for diagnostic in loaded.diagnostics:
            logger.warning("package load: %s", diagnostic)
            if self.telemetry:
                self.telemetry.warning(f"Warning: {diagnostic}")

        if found is None:
            raise HandlerNotFound(
                f"handler function {handler.qualified_name} not found in package or imports",
                symbol=handler.qualified_name,
            )
        decl, decl_file = found
        logger.debug("resolved %s in %s", handler.qualified_name, decl_file.path)
        return self.rules.classify(decl.name, decl.type, self.rules.context_predicate(decl_file))

    def _find(
        self, loaded: LoadedPackage, file: GoFile, handler: HandlerReference
    ) -> Optional[tuple[FuncDecl, GoFile]]:
        name = handler.simple_name
        if handler.package is not None:
            imported = loaded.resolve_import(file, handler.package)
            return imported.find_function(name) if imported is not None else None

        found = loaded.package.find_function(name)
        if found is not None:
            return found
        for package in loaded.dot_imports(file):
            found = package.find_function(name)
            if found is not None:
                return found
        return None


class SignatureClassifier:
    """Tries each strategy in order; only HandlerNotFound falls through to the next."""

    def __init__(
        self,
        strategies: Sequence[SignatureResolver],
        telemetry: Optional[TelemetryPort] = None,
    ) -> None:
        if not strategies:
            raise ValueError("SignatureClassifier needs at least one strategy")
        self.strategies = list(strategies)
        self.telemetry = telemetry

    def classify(self, file: GoFile, handler: HandlerReference) -> SignatureModel:
        last_error = HandlerNotFound(
            f"handler function {handler.qualified_name} not found", symbol=handler.qualified_name)
        for index, strategy in enumerate(self.strategies):
            if index > 0 and self.telemetry:
                self.telemetry.step(
                    f"Handler not found by {self.strategies[index - 1].name} lookup, "
                    f"trying {strategy.name} lookup...")
            try:
                model = strategy.resolve(file, handler)
            except HandlerNotFound as exc:
                logger.debug("%s lookup missed %s: %s", strategy.name, handler.qualified_name, exc)
                last_error = exc
                continue
            logger.debug("%s lookup classified %s as %s",
                         strategy.name, handler.qualified_name, model.describe())
            return model
        raise last_error
