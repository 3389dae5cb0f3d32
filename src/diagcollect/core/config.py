"""Run configuration loading.

Settings come from an optional YAML file; command-line options that were
given explicitly override the file values.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from diagcollect.core.errors import ConfigValidationError
from diagcollect.models.config import CollectionConfig


def load_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> CollectionConfig:
    """Build a CollectionConfig.

    Args:
        path: Optional YAML config file
        overrides: Values that take precedence; None values are ignored

    Returns:
        Validated CollectionConfig

    Raises:
        ConfigValidationError: If the file or the merged values are invalid
    """
    data: dict[str, Any] = {}
    source = str(path) if path else "<options>"

    if path is not None:
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigValidationError(source, [f"Cannot read: {e}"]) from e
        except yaml.YAMLError as e:
            raise ConfigValidationError(source, [f"Invalid YAML: {e}"]) from e
        if not isinstance(loaded, dict):
            raise ConfigValidationError(source, ["Config must be a YAML mapping"])
        data.update(loaded)

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return CollectionConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigValidationError(source, errors) from e
