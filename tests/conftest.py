"""Shared fixtures: parser, printer, default configuration and Go source helpers.

Go snippets in tests are written indented and dedented before parsing.
"""

import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import pytest

from lambda2knative.domain.config import MigrationConfig
from lambda2knative.domain.go_ast import GoFile
from lambda2knative.infrastructure.gateways.go_printer import GoPrinterGateway
from lambda2knative.infrastructure.gateways.tree_sitter_gateway import GoParserGateway


@pytest.fixture
def config() -> MigrationConfig:
    return MigrationConfig()


@pytest.fixture(scope="session")
def parser() -> GoParserGateway:
    return GoParserGateway()


@pytest.fixture
def printer() -> GoPrinterGateway:
    return GoPrinterGateway()


@pytest.fixture
def parse_go(parser: GoParserGateway) -> Callable[..., GoFile]:
    """Parse an indented Go snippet."""

    def _parse(source: str, path: Optional[str] = None) -> GoFile:
        return parser.parse(textwrap.dedent(source).lstrip().encode("utf-8"), path=path)

    return _parse


@pytest.fixture
def write_go(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write an indented snippet to ``tmp_path / relative`` and return its path."""

    def _write(relative: str, source: str) -> Path:
        target = tmp_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
        return target

    return _write
