"""Loading plan files (JSON or YAML)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import yaml
from pydantic import BaseModel, ValidationError

from .errors import PlanLoadingError

if TYPE_CHECKING:
    from pathlib import Path


def load_plan_file[M: BaseModel](path: Path, model: type[M]) -> M:
    """Parse ``path`` into ``model``. YAML is a superset of JSON, so both work."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise PlanLoadingError(f"Cannot read plan {path}: {e}") from e

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise PlanLoadingError(f"Invalid plan {path}:\n{e}") from e
