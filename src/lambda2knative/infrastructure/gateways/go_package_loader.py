"""
Go package loader - the cross-module half of handler resolution.

Loads the package a file belongs to (every non-test ``.go`` file in its
directory with the same package clause) and resolves its imports to package
directories the way the go tool does for a module build: the main module
(``go.mod``), local ``replace`` directives, ``vendor/`` and the module cache.
Standard library packages are never loaded; their identity is the import
path itself.

Problems found on the way (unparseable files, unresolvable imports) are
returned as TypeLoadFailed diagnostics instead of being raised.
"""

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lambda2knative.domain.errors import ParseError, TypeLoadFailed
from lambda2knative.domain.go_ast import FuncDecl, GoFile
from lambda2knative.domain.protocols import GoParserProtocol, PackageLoaderProtocol

logger = logging.getLogger(__name__)

_COMMENT = re.compile(r"//.*$")
_UPPER = re.compile(r"[A-Z]")


@dataclass
class GoModule:
    """The parts of a ``go.mod`` file the loader needs."""

    root: Path
    path: str
    requires: dict[str, str] = field(default_factory=dict)
    replaces: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, root: Path, text: str) -> "GoModule":
        module = cls(root=root, path="")
        block: Optional[str] = None
        for raw in text.splitlines():
            line = _COMMENT.sub("", raw).strip()
            if not line:
                continue
            if block is not None:
                if line == ")":
                    block = None
                else:
                    module._directive(block, line)
                continue
            keyword, _, rest = line.partition(" ")
            rest = rest.strip()
            if rest == "(":
                block = keyword
            else:
                module._directive(keyword, rest)
        return module

    def _directive(self, keyword: str, args: str) -> None:
        if keyword == "module":
            self.path = args.strip('"')
        elif keyword == "require":
            parts = args.split()
            if len(parts) >= 2:
                self.requires[parts[0]] = parts[1]
        elif keyword == "replace":
            old, _, new = args.partition("=>")
            old_path = old.split()[0] if old.split() else ""
            new_parts = new.split()
            if old_path and new_parts:
                self.replaces[old_path] = " ".join(new_parts)


@dataclass
class GoPackageInfo:
    """One loaded package: its import path, clause name and parsed files."""

    import_path: str
    name: str
    directory: str
    files: list[GoFile] = field(default_factory=list)

    def find_function(self, name: str) -> Optional[tuple[FuncDecl, GoFile]]:
        for file in self.files:
            found = file.find_function(name)
            if found is not None:
                return found[1], file
        return None


@dataclass
class LoadedGoPackage:
    """Result of GoPackageLoader.load: the package, its import resolver and the diagnostics."""

    package: GoPackageInfo
    loader: "GoPackageLoader"
    module: Optional[GoModule] = None
    diagnostics: list[TypeLoadFailed] = field(default_factory=list)
    _imports: dict[str, Optional[GoPackageInfo]] = field(default_factory=dict)

    def resolve_import(self, file: GoFile, alias: str) -> Optional[GoPackageInfo]:
        """Package bound to ``alias``; unaliased imports are matched by their package clause."""
        path = file.imported_path(alias)
        if path is not None:
            package = self._load_import(path)
            if package is not None:
                return package
        for spec in file.import_specs():
            if spec.name is not None or spec.path == path:
                continue
            package = self._load_import(spec.path)
            if package is not None and package.name == alias:
                return package
        return None

    def dot_imports(self, file: GoFile) -> list[GoPackageInfo]:
        packages = []
        for spec in file.import_specs():
            if spec.name == ".":
                package = self._load_import(spec.path)
                if package is not None:
                    packages.append(package)
        return packages

    def _load_import(self, import_path: str) -> Optional[GoPackageInfo]:
        if import_path not in self._imports:
            directory = self.loader.locate_import(import_path, self.module)
            if directory is None:
                self._imports[import_path] = None
            else:
                self._imports[import_path] = self.loader.load_directory(
                    directory, import_path, self.diagnostics)
        return self._imports[import_path]


class GoPackageLoader(PackageLoaderProtocol):
    """Loads Go packages from source using the tree-sitter parser."""

    def __init__(self, parser: GoParserProtocol, environ: Optional[Mapping[str, str]] = None) -> None:
        self.parser = parser
        self.environ = os.environ if environ is None else environ

    def load(self, file: GoFile) -> LoadedGoPackage:
        if not file.path:
            empty = GoPackageInfo(import_path="", name=file.package, directory="", files=[file])
            loaded = LoadedGoPackage(package=empty, loader=self)
            loaded.diagnostics.append(
                TypeLoadFailed("file has no path on disk; only its own declarations are visible"))
            return loaded

        file_path = Path(file.path).resolve()
        directory = file_path.parent
        module = self.find_module(directory)
        import_path = self._import_path(directory, module)

        diagnostics: list[TypeLoadFailed] = []
        if module is None:
            diagnostics.append(TypeLoadFailed(
                f"go.mod not found above {directory}; imports cannot be resolved", path=str(directory)))

        package = self.load_directory(directory, import_path, diagnostics, main_file=file)
        loaded = LoadedGoPackage(package=package, loader=self, module=module, diagnostics=diagnostics)

        for spec in file.import_specs():
            if self.is_standard(spec.path) and not self.in_main_module(spec.path, module):
                continue
            if self.locate_import(spec.path, module) is None:
                diagnostics.append(TypeLoadFailed(
                    f"could not import {spec.path} (no required module provides package)",
                    symbol=spec.path,
                    path=file.path,
                ))
        logger.debug("loaded package %s from %s: %d files, %d diagnostics",
                     import_path, directory, len(package.files), len(diagnostics))
        return loaded

    def load_directory(
        self,
        directory: Path,
        import_path: str,
        diagnostics: list[TypeLoadFailed],
        main_file: Optional[GoFile] = None,
    ) -> GoPackageInfo:
        """Parse every non-test ``.go`` file of one package directory."""
        files: list[GoFile] = [main_file] if main_file is not None else []
        main_path = Path(main_file.path).resolve() if main_file is not None and main_file.path else None
        for path in sorted(directory.glob("*.go")):
            if path.name.endswith("_test.go") or path.resolve() == main_path:
                continue
            try:
                files.append(self.parser.parse(path.read_bytes(), path=str(path)))
            except (OSError, ParseError) as exc:
                diagnostics.append(TypeLoadFailed(f"{path}: {exc}", path=str(path)))

        name = files[0].package if files else ""
        kept = []
        for parsed in files:
            if parsed.package == name:
                kept.append(parsed)
            else:
                diagnostics.append(TypeLoadFailed(
                    f"found packages {name} and {parsed.package} in {directory}", path=parsed.path))
        return GoPackageInfo(import_path=import_path, name=name, directory=str(directory), files=kept)

    @staticmethod
    def is_standard(import_path: str) -> bool:
        """Standard library paths have no dot in their first element."""
        return "." not in import_path.split("/")[0]

    @staticmethod
    def in_main_module(import_path: str, module: Optional[GoModule]) -> bool:
        if module is None or not module.path:
            return False
        return import_path == module.path or import_path.startswith(module.path + "/")

    @staticmethod
    def find_module(directory: Path) -> Optional[GoModule]:
        for candidate in (directory, *directory.parents):
            go_mod = candidate / "go.mod"
            if go_mod.is_file():
                return GoModule.parse(candidate, go_mod.read_text(encoding="utf-8"))
        return None

    def locate_import(self, import_path: str, module: Optional[GoModule]) -> Optional[Path]:
        """Directory holding ``import_path``, or None when it cannot be found."""
        if module is None:
            return None
        # main module first: its path need not contain a dot
        if self.in_main_module(import_path, module):
            return self._existing(module.root / import_path[len(module.path):].lstrip("/"))
        if self.is_standard(import_path):
            return None

        replaced = self._longest_prefix(import_path, module.replaces)
        if replaced is not None:
            target = module.replaces[replaced]
            rest = import_path[len(replaced):].lstrip("/")
            if target.startswith((".", "/")):
                return self._existing((module.root / target).resolve() / rest)
            new_path, _, version = target.partition(" ")
            return self._from_cache(new_path, version, rest)

        vendored = self._existing(module.root / "vendor" / import_path)
        if vendored is not None:
            return vendored

        required = self._longest_prefix(import_path, module.requires)
        if required is not None:
            rest = import_path[len(required):].lstrip("/")
            return self._from_cache(required, module.requires[required], rest)
        return None

    def module_cache(self) -> Path:
        if self.environ.get("GOMODCACHE"):
            return Path(self.environ["GOMODCACHE"])
        gopath = self.environ.get("GOPATH", "").split(os.pathsep)[0]
        if gopath:
            return Path(gopath) / "pkg" / "mod"
        return Path.home() / "go" / "pkg" / "mod"

    def _from_cache(self, module_path: str, version: str, rest: str) -> Optional[Path]:
        if not version:
            return None
        escaped = _UPPER.sub(lambda m: "!" + m.group(0).lower(), module_path)
        return self._existing(self.module_cache() / f"{escaped}@{version}" / rest)

    @staticmethod
    def _existing(path: Path) -> Optional[Path]:
        return path if path.is_dir() else None

    @staticmethod
    def _longest_prefix(import_path: str, candidates: Mapping[str, str]) -> Optional[str]:
        matches = [c for c in candidates if import_path == c or import_path.startswith(c + "/")]
        return max(matches, key=len) if matches else None

    @staticmethod
    def _import_path(directory: Path, module: Optional[GoModule]) -> str:
        if module is None:
            return directory.name
        rel = directory.relative_to(module.root).as_posix()
        return module.path if rel == "." else f"{module.path}/{rel}"
