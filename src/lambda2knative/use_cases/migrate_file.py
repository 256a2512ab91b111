"""Use Case: migrate one Go file from a Lambda handler to a Knative function."""

import logging
from typing import Optional

from lambda2knative.domain.protocols import (
    FileSystemProtocol,
    GoParserProtocol,
    GoPrinterProtocol,
    TelemetryPort,
)
from lambda2knative.use_cases.transform import TransformUseCase

logger = logging.getLogger(__name__)


class MigrateFileUseCase:
    """Read, parse, transform, print and (optionally) write one file."""

    def __init__(
        self,
        filesystem: FileSystemProtocol,
        parser: GoParserProtocol,
        printer: GoPrinterProtocol,
        transform: TransformUseCase,
        telemetry: TelemetryPort,
    ) -> None:
        self.filesystem = filesystem
        self.parser = parser
        self.printer = printer
        self.transform = transform
        self.telemetry = telemetry

    def execute(self, input_path: str, output_path: Optional[str] = None) -> str:
        """Return the migrated source; also write it when ``output_path`` is given."""
        path = self.filesystem.resolve_path(input_path)
        source = self.filesystem.read_bytes(path)
        file = self.parser.parse(source, path=path)

        result = self.transform.execute(file)
        self.telemetry.step(f"Handler signature: {result.signature.describe()}")

        output = self.printer.print_file(file)
        if output_path:
            self.filesystem.write_text(output_path, output)
            logger.debug("wrote %d bytes to %s", len(output), output_path)

        self.telemetry.step("Successfully transformed Lambda handler to Knative function")
        return output
