"""Load [tool.lambda2knative] from lambda2knative.toml or pyproject.toml. Infrastructure I/O only."""

import logging
import sys
from pathlib import Path
from typing import Optional

from lambda2knative.domain.constants import CONFIG_FILES, CONFIG_SECTION

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib

logger = logging.getLogger(__name__)


class ConfigFileLoader:
    """Finds the nearest config file at or above a directory."""

    @staticmethod
    def load_config_from_fs(start_dir: Optional[str] = None) -> dict[str, object]:
        """Return the ``[tool.lambda2knative]`` table, or an empty dict when there is none.

        The search stops at the first ``lambda2knative.toml``, or the first
        ``pyproject.toml`` that carries the table. A malformed file raises
        ValueError.
        """
        current_path = Path(start_dir).resolve() if start_dir else Path.cwd()
        for directory in (current_path, *current_path.parents):
            for name in CONFIG_FILES:
                config_file = directory / name
                if not config_file.is_file():
                    continue
                try:
                    with config_file.open("rb") as f:
                        data = toml_lib.load(f)
                except toml_lib.TOMLDecodeError as exc:
                    raise ValueError(f"Invalid configuration file {config_file}: {exc}") from exc
                except OSError as exc:
                    logger.warning("Configuration Warning: cannot read %s: %s", config_file, exc)
                    continue
                tool_section = data.get("tool", {}) or {}
                section = tool_section.get(CONFIG_SECTION, {}) or {}
                if name == "pyproject.toml" and not section:
                    continue
                logger.debug("configuration loaded from %s", config_file)
                return dict(section)
        return {}
