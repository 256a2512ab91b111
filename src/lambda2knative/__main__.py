"""Package entry point - composition root. Wire dependencies and run the CLI app."""

from lambda2knative.infrastructure.di.container import MigratorContainer
from lambda2knative.interface.cli import CLIAppFactory, CLIDependencies


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    container = MigratorContainer.get_instance()

    deps = CLIDependencies(
        telemetry=container.get_telemetry_port(),
        migrate_factory=container.create_migrate_use_case,
    )

    app = CLIAppFactory.create_app(deps)
    app()


if __name__ == "__main__":
    main()
