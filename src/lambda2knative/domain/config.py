"""Migration settings. Immutable value objects created by Infrastructure."""

import dataclasses
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationConfig:
    """Well-known identifiers the migrator looks for and generates."""

    entry_function: str = "main"
    start_package: str = "lambda"
    start_method: str = "Start"
    framework_import_marker: str = "aws-lambda-go"
    context_package: str = "context"
    context_type: str = "Context"
    error_type: str = "error"
    adapter_type: str = "Handler"
    constructor: str = "New"
    dispatch_method: str = "Handle"


class ConfigurationLoader:
    """
    Validated configuration for a run.

    Created by Infrastructure from the ``[tool.lambda2knative]`` table. Domain
    does not read the filesystem; the composition root calls
    ConfigFileLoader.load_config_from_fs() and passes the table in.
    """

    def __init__(self, config_dict: dict[str, object]) -> None:
        self._config = config_dict
        self._migration = self.validate_config(config_dict)

    @staticmethod
    def validate_config(config: dict[str, object]) -> MigrationConfig:
        """Build a MigrationConfig, rejecting non-string values and empty strings."""
        known = {f.name for f in dataclasses.fields(MigrationConfig)}
        values: dict[str, str] = {}
        for key, value in config.items():
            name = key.replace("-", "_")
            if name not in known:
                logger.warning("Configuration Warning: unknown key '%s' ignored.", key)
                continue
            if not isinstance(value, str) or not value:
                raise ValueError(f"Configuration key '{key}' must be a non-empty string")
            values[name] = value
        return MigrationConfig(**values)

    @property
    def config(self) -> dict[str, object]:
        """Return the raw configuration table."""
        return self._config

    @property
    def migration(self) -> MigrationConfig:
        return self._migration
