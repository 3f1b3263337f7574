"""App scaffolder -- produces the standard file set for a registered app.

Quick usage::

    from appregistry.scaffolder import ScaffoldEmitter, write_file_set

    file_set = ScaffoldEmitter().emit(record)
    paths = await write_file_set(file_set, "./generated-apps")
"""

from appregistry.scaffolder.emitter import (
    FileSet,
    ScaffoldEmitter,
    ScaffoldExistsError,
    ScaffoldFile,
    write_file_set,
)
from appregistry.scaffolder.templates import TemplateRenderer

__all__ = [
    "FileSet",
    "ScaffoldEmitter",
    "ScaffoldExistsError",
    "ScaffoldFile",
    "TemplateRenderer",
    "write_file_set",
]
