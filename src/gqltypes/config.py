from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field

from gqltypes import log
from gqltypes.document.document import NameCollisionPolicy
from gqltypes.document.errors import ErrorFormat


class GqlTypesConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    schema_paths: list[Path] = Field(default_factory=list, alias="schema")
    operations: list[Path] = Field(default_factory=list)
    error_format: ErrorFormat = ErrorFormat.PRETTY
    name_collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW

    def resolve_paths(self, base_dir: Path) -> "GqlTypesConfig":
        """Return a copy whose relative paths are anchored at `base_dir`."""
        return self.model_copy(
            update={
                "schema_paths": [base_dir / p for p in self.schema_paths],
                "operations": [base_dir / p for p in self.operations],
            }
        )


def load_config(config_path: Path | None) -> GqlTypesConfig:
    """
    Load and validate a gqltypes configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.

    Returns:
        A validated GqlTypesConfig. Relative paths are resolved against the
        directory of the configuration file.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        TypeError: If the YAML root is not a mapping.
        ValidationError: If validation against GqlTypesConfig fails.
    """
    if config_path is None:
        log.debug("No config provided")
        return GqlTypesConfig()

    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug(f"Loaded config from {config_path}")

    # Treat empty file or explicit YAML null as "defaults"
    if raw is None:
        return GqlTypesConfig()

    if not isinstance(raw, dict):
        raise TypeError(f"Config root must be a mapping (YAML object), got {type(raw).__name__}")

    config = GqlTypesConfig.model_validate(cast(dict[str, Any], raw))
    return config.resolve_paths(config_path.parent)
