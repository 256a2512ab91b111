"""Use Case: replace the Lambda entry function with the Knative adapter."""

import logging
from collections.abc import Sequence

from lambda2knative.domain.config import MigrationConfig
from lambda2knative.domain.entities import AdapterDeclarationSet, TransformResult
from lambda2knative.domain.errors import EntryNotFound
from lambda2knative.domain.go_ast import Decl, FuncDecl, GoFile
from lambda2knative.domain.protocols import TelemetryPort
from lambda2knative.use_cases.classify_signature import SignatureClassifier
from lambda2knative.use_cases.locate_entry import EntryPointLocator
from lambda2knative.use_cases.rewrite_imports import ImportRewriter
from lambda2knative.use_cases.synthesize_adapter import AdapterSynthesizer

logger = logging.getLogger(__name__)


class TransformUseCase:
    """Sequence locate, classify, rewrite imports, synthesize and splice on one GoFile.

    Every step before the final commit works on a copy of the declaration
    list, so a failing run leaves the file untouched.
    """

    def __init__(
        self,
        config: MigrationConfig,
        classifier: SignatureClassifier,
        locator: EntryPointLocator | None = None,
        import_rewriter: ImportRewriter | None = None,
        synthesizer: AdapterSynthesizer | None = None,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self.config = config
        self.classifier = classifier
        self.locator = locator or EntryPointLocator(config)
        self.import_rewriter = import_rewriter or ImportRewriter(config)
        self.synthesizer = synthesizer or AdapterSynthesizer(config)
        self.telemetry = telemetry

    def execute(self, file: GoFile) -> TransformResult:
        handler = self.locator.locate(file)
        if self.telemetry:
            self.telemetry.step(f"Found Lambda handler: {handler.qualified_name}")
        signature = self.classifier.classify(file, handler)

        decls, imports = self.import_rewriter.rewrite(file.decls, signature)
        index = self.entry_index(decls)
        adapter = self.synthesizer.synthesize(handler, signature, imports.aliases)
        file.decls = self.splice(decls, index, adapter)

        logger.debug("replaced %s with %s adapter for %s",
                     self.config.entry_function, signature.describe(), handler.qualified_name)
        return TransformResult(handler=handler, signature=signature, imports=imports)

    def entry_index(self, decls: Sequence[Decl]) -> int:
        name = self.config.entry_function
        for index, decl in enumerate(decls):
            if isinstance(decl, FuncDecl) and decl.recv is None and decl.name == name:
                return index
        raise EntryNotFound(f"{name} function not found while splicing the adapter", symbol=name)

    @staticmethod
    def splice(decls: Sequence[Decl], index: int, adapter: AdapterDeclarationSet) -> list[Decl]:
        """Put the adapter declarations where the entry function was."""
        entry = decls[index]
        new_decls = adapter.as_list()
        if isinstance(entry, FuncDecl) and entry.doc:
            new_decls[0] = new_decls[0].with_changes(doc=entry.doc)
        return [*decls[:index], *new_decls, *decls[index + 1:]]
