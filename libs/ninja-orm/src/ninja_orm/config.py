"""Read and validate .ninjastack/orm.json configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_MAX_HOPS = 32


class OrmConfig(BaseModel):
    """Top-level ORM configuration from .ninjastack/orm.json."""

    strict_lens: bool = Field(default=True, description="Lens functions must return the chained relation.")
    validate_paths: bool = Field(default=True, description="Check paths against entity metadata before walking.")
    max_hops: int = Field(default=DEFAULT_MAX_HOPS, gt=0, description="Longest path a traversal may take.")

    model_config = {"extra": "forbid"}


def load_orm_config(project_root: str | Path | None = None) -> OrmConfig:
    """Load orm.json from the .ninjastack directory.

    Falls back to defaults when the file doesn't exist.
    """
    if project_root is None:
        project_root = Path(os.getenv("NINJASTACK_ROOT", "."))
    else:
        project_root = Path(project_root)

    config_path = project_root / ".ninjastack" / "orm.json"

    if not config_path.exists():
        return OrmConfig()

    data = json.loads(config_path.read_text())
    return OrmConfig.model_validate(data)
