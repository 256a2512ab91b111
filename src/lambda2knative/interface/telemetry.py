"""Terminal implementation of the TelemetryPort."""

import typer

from lambda2knative.domain.protocols import TelemetryPort


class ProjectTelemetry(TelemetryPort):
    """Writes progress to stderr so stdout carries only generated code."""

    def __init__(self, project_name: str, color: str = typer.colors.CYAN, quiet: bool = False) -> None:
        self.project_name = project_name
        self.color = color
        self.quiet = quiet

    def step(self, message: str) -> None:
        if not self.quiet:
            typer.secho(message, fg=self.color, err=True)

    def warning(self, message: str) -> None:
        typer.secho(message, fg=typer.colors.YELLOW, err=True)

    def error(self, message: str) -> None:
        typer.secho(f"[{self.project_name}] {message}", fg=typer.colors.RED, err=True)
