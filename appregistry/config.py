"""App registry configuration.

Centralised, typed configuration for registration and scaffolding. All
settings use Pydantic v2 models so they can be validated at construction time
and built from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from appregistry.registry.bounder import DEFAULT_DESCRIPTION_MAX_CHARS

_TRUTHY = {"1", "true", "yes", "on"}


class LimitsConfig(BaseModel):
    """Display budgets for bounded metadata fields."""

    description_max_chars: int = Field(
        default=DEFAULT_DESCRIPTION_MAX_CHARS,
        ge=1,
        description="Hard-cut length for app descriptions",
    )


class ScaffoldConfig(BaseModel):
    """Which files the scaffold emitter produces and where inside the app."""

    entry_shell_path: str = Field(default="src/app/layout.tsx")
    stylesheet_path: str = Field(default="src/app/globals.css")
    include_readme: bool = Field(default=True)
    include_metadata_export: bool = Field(
        default=True, description="Emit app.json with the registered metadata"
    )
    template_dir: Path | None = Field(
        default=None, description="Override the bundled Jinja2 template directory"
    )


class Config(BaseModel):
    """Global app registry configuration.

    Instances are typically created once by the CLI entry point (or by
    ``RegistrationService``) and then passed through the rest of the system.
    """

    output_dir: Path = Field(default=Path("./generated-apps"))
    data_dir: Path = Field(default=Path("./data"))
    registry_file: str = Field(default="registry.json")
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    scaffold: ScaffoldConfig = Field(default_factory=ScaffoldConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def registry_path(self) -> Path:
        """Path to the persisted registry JSON file."""
        return self.data_dir / self.registry_file

    def app_dir(self, slug: str) -> Path:
        """Directory a registered app's scaffold is written to."""
        return self.output_dir / slug

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            APPREG_OUTPUT_DIR, APPREG_DATA_DIR, APPREG_REGISTRY_FILE,
            APPREG_DESCRIPTION_MAX_CHARS, APPREG_INCLUDE_README,
            APPREG_INCLUDE_METADATA_EXPORT.
        """
        limits_kwargs: dict[str, Any] = {}
        if os.environ.get("APPREG_DESCRIPTION_MAX_CHARS"):
            limits_kwargs["description_max_chars"] = int(os.environ["APPREG_DESCRIPTION_MAX_CHARS"])

        scaffold_kwargs: dict[str, Any] = {}
        if os.environ.get("APPREG_INCLUDE_README"):
            scaffold_kwargs["include_readme"] = (
                os.environ["APPREG_INCLUDE_README"].strip().lower() in _TRUTHY
            )
        if os.environ.get("APPREG_INCLUDE_METADATA_EXPORT"):
            scaffold_kwargs["include_metadata_export"] = (
                os.environ["APPREG_INCLUDE_METADATA_EXPORT"].strip().lower() in _TRUTHY
            )

        return cls(
            output_dir=Path(os.environ.get("APPREG_OUTPUT_DIR", "./generated-apps")),
            data_dir=Path(os.environ.get("APPREG_DATA_DIR", "./data")),
            registry_file=os.environ.get("APPREG_REGISTRY_FILE", "registry.json"),
            limits=LimitsConfig(**limits_kwargs),
            scaffold=ScaffoldConfig(**scaffold_kwargs),
        )

    def ensure_directories(self) -> None:
        """Create the data and output directories if missing."""
        for directory in (self.data_dir, self.output_dir):
            directory.mkdir(parents=True, exist_ok=True)
