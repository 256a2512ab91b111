from typing import TYPE_CHECKING, Any, Optional, cast

from lambda2knative.domain.config import ConfigurationLoader, MigrationConfig
from lambda2knative.infrastructure.config_file_loader import ConfigFileLoader
from lambda2knative.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from lambda2knative.infrastructure.gateways.go_package_loader import GoPackageLoader
from lambda2knative.infrastructure.gateways.go_printer import GoPrinterGateway
from lambda2knative.infrastructure.gateways.tree_sitter_gateway import GoParserGateway
from lambda2knative.interface.telemetry import ProjectTelemetry
from lambda2knative.use_cases.classify_signature import (
    LocalSignatureResolver,
    PackageSignatureResolver,
    SignatureClassifier,
)
from lambda2knative.use_cases.migrate_file import MigrateFileUseCase
from lambda2knative.use_cases.transform import TransformUseCase

if TYPE_CHECKING:
    from lambda2knative.domain.protocols import (
        FileSystemProtocol,
        GoParserProtocol,
        GoPrinterProtocol,
        PackageLoaderProtocol,
        TelemetryPort,
    )


class MigratorContainer:
    """Dependency Injection Container for the Lambda to Knative migrator."""

    _instance: Optional["MigratorContainer"] = None

    def __init__(self) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default implementations for protocols."""
        self.register_singleton("TelemetryPort", ProjectTelemetry("lambda2knative"))
        self.register_singleton("FileSystemGateway", FileSystemGateway())
        parser = GoParserGateway()
        self.register_singleton("GoParserGateway", parser)
        self.register_singleton("GoPrinterGateway", GoPrinterGateway())
        self.register_singleton("GoPackageLoader", GoPackageLoader(parser))

    # JUSTIFICATION: DI Container must handle any type of service
    def register_singleton(self, key: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[key] = instance

    # JUSTIFICATION: DI Container must return any type of service
    def get(self, key: str) -> Any:
        """Retrieve a dependency by key. Prefer explicit get_* methods for type safety."""
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_telemetry_port(self) -> "TelemetryPort":
        """Return the telemetry/UI port."""
        return cast("TelemetryPort", self.get("TelemetryPort"))

    def get_filesystem_gateway(self) -> "FileSystemProtocol":
        return cast("FileSystemProtocol", self.get("FileSystemGateway"))

    def get_parser(self) -> "GoParserProtocol":
        """Return the tree-sitter Go parser."""
        return cast("GoParserProtocol", self.get("GoParserGateway"))

    def get_printer(self) -> "GoPrinterProtocol":
        return cast("GoPrinterProtocol", self.get("GoPrinterGateway"))

    def get_package_loader(self) -> "PackageLoaderProtocol":
        """Return the loader used by the cross-package lookup."""
        return cast("PackageLoaderProtocol", self.get("GoPackageLoader"))

    def get_config_loader(self, start_dir: Optional[str] = None) -> ConfigurationLoader:
        """Configuration for files under ``start_dir``; cached per directory."""
        key = f"ConfigurationLoader:{start_dir or ''}"
        if key not in self._singletons:
            config_dict = ConfigFileLoader.load_config_from_fs(start_dir)
            self.register_singleton(key, ConfigurationLoader(config_dict))
        return cast(ConfigurationLoader, self.get(key))

    def get_classifier(self, config: MigrationConfig) -> SignatureClassifier:
        """Local lookup first, then the package loader."""
        telemetry = self.get_telemetry_port()
        return SignatureClassifier(
            [
                LocalSignatureResolver(config),
                PackageSignatureResolver(self.get_package_loader(), config, telemetry),
            ],
            telemetry=telemetry,
        )

    def create_migrate_use_case(self, start_dir: Optional[str] = None) -> MigrateFileUseCase:
        """Build the migration use case with the configuration found above ``start_dir``."""
        config = self.get_config_loader(start_dir).migration
        telemetry = self.get_telemetry_port()
        transform = TransformUseCase(config, self.get_classifier(config), telemetry=telemetry)
        return MigrateFileUseCase(
            filesystem=self.get_filesystem_gateway(),
            parser=self.get_parser(),
            printer=self.get_printer(),
            transform=transform,
            telemetry=telemetry,
        )

    @classmethod
    def get_instance(cls) -> "MigratorContainer":
        """Get or create global container instance."""
        if cls._instance is None:
            cls._instance = MigratorContainer()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        cls._instance = None
