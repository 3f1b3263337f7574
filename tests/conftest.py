"""Shared pytest fixtures for the app registry test suite.

Provides reusable fixtures for:
- Raw prompts observed from real users (typos, all caps, stray punctuation)
- Empty and pre-populated registries
- A ``Config`` rooted in a temporary directory
- A ``RegistrationService`` wired to that config
"""

from __future__ import annotations

from pathlib import Path

import pytest

from appregistry.config import Config
from appregistry.registry import AppRecord, Registry
from appregistry.service import RegistrationService


# ---------------------------------------------------------------------------
# Sample prompts
# ---------------------------------------------------------------------------

LOG_TOOL_DESCRIPTION = (
    "BUILD me a website for a log tool that is cutting edge, it will collect "
    "all logs from every server and show them on a dashboard"
)
ANALYTICS_DESCRIPTION = "Build me a log anyltics tool wesbsite that showsthat auto capture events"


@pytest.fixture
def sample_prompts() -> list[tuple[str, str]]:
    """(title, description) pairs as users actually typed them."""
    return [
        ("BUILD me a", LOG_TOOL_DESCRIPTION),
        ("BULDMEA", "BULD ME A WEBSITE OF A LOG ANYLTICS TOOL FOR COLECTING ALL LOGS"),
        ("is Make me", "is Make me a habit tracker"),
        ("FitTrack", "A fitness tracker for runners"),
    ]


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

@pytest.fixture
def empty_registry() -> Registry:
    return Registry()


@pytest.fixture
def populated_registry() -> Registry:
    """Registry holding three apps with sequences 1..3."""
    return Registry(
        [
            AppRecord(slug="build-me-a", title="BUILD me a", description="log tool", sequence=1),
            AppRecord(slug="buldmea", title="BULDMEA", description="log analytics", sequence=2),
            AppRecord(slug="build-me-a-2", title="Build me a!", description="again", sequence=3),
        ]
    )


# ---------------------------------------------------------------------------
# Config & service
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_config(tmp_path: Path) -> Config:
    """Config whose data and output directories live under ``tmp_path``."""
    return Config(
        output_dir=tmp_path / "generated-apps",
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def service(tmp_config: Config) -> RegistrationService:
    return RegistrationService(tmp_config)
