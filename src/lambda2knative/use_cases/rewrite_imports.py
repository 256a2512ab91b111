"""Use Case: drop the Lambda SDK imports and add the packages the adapter needs."""

import logging
from collections.abc import Sequence
from itertools import groupby

from lambda2knative.domain.config import MigrationConfig
from lambda2knative.domain.constants import (
    CONTEXT_PATH,
    HTTP_PATH,
    IO_PATH,
    JSON_PATH,
    LOG_PATH,
    SUPPORT_IMPORTS,
)
from lambda2knative.domain.entities import (
    ImportAliases,
    ImportRequirement,
    ImportRewrite,
    SignatureModel,
)
from lambda2knative.domain.go_ast import Decl, ImportDecl, ImportSpec, default_package_name

logger = logging.getLogger(__name__)


class ImportRewriter:
    """Computes the import declarations of the migrated file."""

    def __init__(self, config: MigrationConfig) -> None:
        self.config = config

    def rewrite(
        self, decls: Sequence[Decl], signature: SignatureModel
    ) -> tuple[list[Decl], ImportRewrite]:
        """Return the new declaration list and the aliases the adapter must use."""
        new_decls, removed = self.remove_framework_imports(decls)
        imports = self.required_imports(new_decls, signature)

        missing = [req for req in imports.values() if req.required and not req.present]
        if missing:
            new_decls = self._add_imports(new_decls, missing)

        rewrite = ImportRewrite(
            aliases=ImportAliases(
                context=imports[CONTEXT_PATH].alias,
                http=imports[HTTP_PATH].alias,
                io=imports[IO_PATH].alias,
                json=imports[JSON_PATH].alias,
                log=imports[LOG_PATH].alias,
            ),
            removed=removed,
            added=[req.path for req in missing],
        )
        logger.debug("imports removed=%s added=%s", rewrite.removed, rewrite.added)
        return new_decls, rewrite

    def remove_framework_imports(self, decls: Sequence[Decl]) -> tuple[list[Decl], list[str]]:
        """Drop every import whose path contains the framework marker, and any block left empty."""
        marker = self.config.framework_import_marker
        result: list[Decl] = []
        removed: list[str] = []
        for decl in decls:
            if not isinstance(decl, ImportDecl):
                result.append(decl)
                continue
            kept = tuple(spec for spec in decl.specs if marker not in spec.path)
            removed.extend(spec.path for spec in decl.specs if marker in spec.path)
            if not kept:
                continue
            if len(kept) == len(decl.specs):
                result.append(decl)
            else:
                result.append(decl.with_changes(specs=kept, source=None))
        return result, removed

    def required_imports(
        self, decls: Sequence[Decl], signature: SignatureModel
    ) -> dict[str, ImportRequirement]:
        """Build the ImportSet for the support packages, reusing aliases already in the file."""
        needed = {
            CONTEXT_PATH: True,
            HTTP_PATH: True,
            IO_PATH: signature.has_input,
            JSON_PATH: signature.has_output,
            LOG_PATH: signature.has_error,
        }
        imports = {
            path: ImportRequirement(path=path, alias=default_package_name(path), required=needed[path])
            for path in SUPPORT_IMPORTS
        }

        specs = [spec for decl in decls if isinstance(decl, ImportDecl) for spec in decl.specs]
        for spec in specs:
            req = imports.get(spec.path)
            if req is not None and spec.is_usable and not req.present:
                req.present = True
                req.alias = spec.alias

        taken = {spec.alias: spec.path for spec in specs if spec.is_usable}
        for req in imports.values():
            if req.present or not req.required:
                continue
            owner = taken.get(req.alias)
            if owner is not None and owner != req.path:
                req.alias = "std" + req.alias
        return imports

    def _add_imports(self, decls: list[Decl], missing: list[ImportRequirement]) -> list[Decl]:
        for index, decl in enumerate(decls):
            if isinstance(decl, ImportDecl):
                group = min(spec.group for spec in decl.specs)
                added = tuple(self._spec(req, group) for req in missing)
                specs = self.sort_specs(decl.specs + added)
                result = list(decls)
                result[index] = decl.with_changes(specs=specs, parenthesized=True, source=None)
                return result

        specs = self.sort_specs(tuple(self._spec(req, 0) for req in missing))
        return [ImportDecl(specs=specs, parenthesized=len(specs) > 1), *decls]

    @staticmethod
    def _spec(req: ImportRequirement, group: int) -> ImportSpec:
        name = None if req.alias == default_package_name(req.path) else req.alias
        return ImportSpec(path=req.path, name=name, group=group)

    @staticmethod
    def sort_specs(specs: tuple[ImportSpec, ...]) -> tuple[ImportSpec, ...]:
        """Sort by path inside each group, keeping the groups in order (goimports layout)."""
        ordered = sorted(specs, key=lambda spec: spec.group)
        result: list[ImportSpec] = []
        for _, group in groupby(ordered, key=lambda spec: spec.group):
            result.extend(sorted(group, key=lambda spec: (spec.path, spec.name or "")))
        return tuple(result)
