from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field

from schema_assembler import log
from schema_assembler.errors import ConfigError


class AssemblerConfig(BaseModel):
    """Options of one assembly run, as read from YAML (camelCase keys) or passed in code."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    strict_validation: bool = Field(True, alias="strictValidation")
    skip_entity_extraction: bool = Field(False, alias="skipEntityExtraction")

    def override(self, **overrides: bool | None) -> "AssemblerConfig":
        """Return a copy with every non-None override applied (CLI flags win over the file)."""
        update = {key: value for key, value in overrides.items() if value is not None}
        return self.model_copy(update=update) if update else self


def load_assembler_config(config_path: Path | None) -> AssemblerConfig:
    """
    Load and validate an assembler configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.

    Returns:
        A validated AssemblerConfig.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        ConfigError: If the YAML root is not a mapping.
        ValidationError: If validation against AssemblerConfig fails.
    """
    if config_path is None:
        log.debug("No assembler config provided, using defaults")
        return AssemblerConfig()

    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug("Loaded assembler config from %s", config_path)

    # Treat empty file or explicit YAML null as "defaults"
    if raw is None or raw == {}:
        return AssemblerConfig()

    if not isinstance(raw, dict):
        raise ConfigError(f"Assembler config root must be a mapping (YAML object), got {type(raw).__name__}")

    return AssemblerConfig.model_validate(cast(dict[str, Any], raw))
