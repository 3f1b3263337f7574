"""App registration core -- turns raw prompts into registry-safe records.

Quick usage::

    from appregistry.registry import Registry

    registry = Registry()
    record = registry.register("BUILD me a", "BUILD me a website for a log tool ...")
    record.slug         # "build-me-a"
    record.description  # first 62 characters of the description
"""

from appregistry.registry.bounder import DEFAULT_DESCRIPTION_MAX_CHARS, bound, ensure_bounded
from appregistry.registry.builder import build_record
from appregistry.registry.exceptions import (
    AppNotFound,
    InvalidTitle,
    RegistrationError,
    RegistryCorruption,
    StaleRecord,
    TextBoundViolation,
)
from appregistry.registry.models import AppRecord, AppRequest
from appregistry.registry.resolver import resolve
from appregistry.registry.slug import is_valid_slug, normalize
from appregistry.registry.store import Registry

__all__ = [
    "DEFAULT_DESCRIPTION_MAX_CHARS",
    "AppNotFound",
    "AppRecord",
    "AppRequest",
    "InvalidTitle",
    "RegistrationError",
    "Registry",
    "RegistryCorruption",
    "StaleRecord",
    "TextBoundViolation",
    "bound",
    "build_record",
    "ensure_bounded",
    "is_valid_slug",
    "normalize",
    "resolve",
]
