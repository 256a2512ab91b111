"""CLI entry points for lambda2knative - Thin Controller using Typer."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from lambda2knative.domain.errors import MigrationError
from lambda2knative.domain.protocols import TelemetryPort
from lambda2knative.use_cases.migrate_file import MigrateFileUseCase

_INPUT = typer.Option(..., "--input", "-i", help="Go source file containing the Lambda handler")
_OUTPUT = typer.Option(None, "--output", "-o", help="Write the result here instead of stdout")
_VERBOSE = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    telemetry: TelemetryPort
    # Builds the use case for files under the given directory (config is looked up from there).
    migrate_factory: Callable[[str], MigrateFileUseCase]


class CLIAppFactory:
    """Creates the Typer app."""

    @staticmethod
    def configure_logging(verbose: bool) -> None:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies."""
        app = typer.Typer(
            name="lambda2knative",
            help="Convert an AWS Lambda Go entry point into a Knative function.",
            add_completion=False,
        )

        @app.callback()
        def main() -> None:
            """Lambda to Knative migration tool."""

        @app.command()
        def migrate(
            input_path: Path = _INPUT,
            output_path: Optional[Path] = _OUTPUT,
            verbose: bool = _VERBOSE,
        ) -> None:
            """Replace lambda.Start in main with a Handler/New/Handle adapter."""
            CLIAppFactory.configure_logging(verbose)
            try:
                use_case = deps.migrate_factory(str(input_path.parent))
            except ValueError as exc:
                deps.telemetry.error(f"Failed to load configuration: {exc}")
                raise typer.Exit(code=1) from exc

            try:
                output = use_case.execute(
                    str(input_path), str(output_path) if output_path else None)
            except MigrationError as exc:
                deps.telemetry.error(f"Failed to {exc.stage}: {exc}")
                raise typer.Exit(code=1) from exc
            except OSError as exc:
                deps.telemetry.error(f"Failed to read file: {exc}")
                raise typer.Exit(code=1) from exc

            if output_path is None:
                typer.echo(output, nl=False)

        return app
