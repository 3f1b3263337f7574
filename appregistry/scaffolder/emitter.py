"""Scaffold emission for registered apps.

``ScaffoldEmitter.emit`` turns an ``AppRecord`` into an in-memory ``FileSet``
without touching the filesystem.  The only record-dependent content in the
entry shell is the exported ``metadata`` block; the stylesheet is shared by
every generated app and rendered from a static template.  Writing a file set
to disk is a separate step (:func:`write_file_set`).
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import posixpath
import shutil
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict, Field

from appregistry.config import ScaffoldConfig
from appregistry.registry.models import AppRecord

from .templates import TemplateRenderer

LAYOUT_TEMPLATE = "layout.tsx.j2"
STYLESHEET_TEMPLATE = "globals.css.j2"
README_TEMPLATE = "README.md.j2"
METADATA_EXPORT_PATH = "app.json"
README_PATH = "README.md"


class ScaffoldExistsError(Exception):
    """Raised when an app directory already exists and overwrite is off."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Scaffold directory already exists: {path}")


# ---------------------------------------------------------------------------
# In-memory file set
# ---------------------------------------------------------------------------


class ScaffoldFile(BaseModel):
    """One generated file, addressed by a POSIX path relative to the app root."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Relative POSIX path, e.g. 'src/app/layout.tsx'")
    content: str


class FileSet(BaseModel):
    """The complete, ordered set of files generated for one app."""

    model_config = ConfigDict(frozen=True)

    slug: str
    files: tuple[ScaffoldFile, ...] = ()

    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    def get(self, path: str) -> ScaffoldFile | None:
        for f in self.files:
            if f.path == path:
                return f
        return None

    def digest(self) -> str:
        """SHA-256 over every path and content, in order."""
        h = hashlib.sha256()
        for f in self.files:
            h.update(f.path.encode("utf-8"))
            h.update(b"\0")
            h.update(f.content.encode("utf-8"))
            h.update(b"\0")
        return h.hexdigest()


# ---------------------------------------------------------------------------
# Emitter
# ---------------------------------------------------------------------------


class ScaffoldEmitter:
    """Produces the standard app file set from an ``AppRecord``.

    Output is a pure function of the record and the scaffold configuration:
    emitting the same record twice yields byte-identical files.
    """

    def __init__(
        self,
        config: ScaffoldConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or ScaffoldConfig()
        self.renderer = renderer or TemplateRenderer(self.config.template_dir)
        for rel in (self.config.entry_shell_path, self.config.stylesheet_path):
            _check_relative(rel)

    def emit(self, record: AppRecord) -> FileSet:
        context = self._build_context(record)
        files = [
            ScaffoldFile(
                path=self.config.entry_shell_path,
                content=self.renderer.render(LAYOUT_TEMPLATE, context),
            ),
            ScaffoldFile(
                path=self.config.stylesheet_path,
                content=self.renderer.render(STYLESHEET_TEMPLATE),
            ),
        ]
        if self.config.include_readme:
            files.append(
                ScaffoldFile(path=README_PATH, content=self.renderer.render(README_TEMPLATE, context))
            )
        if self.config.include_metadata_export:
            files.append(ScaffoldFile(path=METADATA_EXPORT_PATH, content=_metadata_export(record)))
        return FileSet(slug=record.slug, files=tuple(files))

    def stylesheet_import(self) -> str:
        """Import specifier for the stylesheet, relative to the entry shell."""
        shell_dir = posixpath.dirname(self.config.entry_shell_path) or "."
        rel = posixpath.relpath(self.config.stylesheet_path, shell_dir)
        return rel if rel.startswith(".") else f"./{rel}"

    def _build_context(self, record: AppRecord) -> dict[str, object]:
        return {
            "slug": record.slug,
            "title": record.title,
            "description": record.description,
            "sequence": record.sequence,
            "stylesheet_import": self.stylesheet_import(),
        }


def _metadata_export(record: AppRecord) -> str:
    return json.dumps(record.model_dump(), indent=2, ensure_ascii=False) + "\n"


def _check_relative(path: str) -> None:
    pure = PurePosixPath(path)
    if pure.is_absolute() or ".." in pure.parts or not pure.parts:
        raise ValueError(f"Scaffold path must be relative and inside the app root: {path!r}")


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


async def write_file_set(
    file_set: FileSet,
    output_dir: str | Path,
    *,
    overwrite: bool = False,
) -> list[Path]:
    """Write *file_set* into ``<output_dir>/<slug>/``.

    Args:
        file_set: Files produced by :meth:`ScaffoldEmitter.emit`.
        output_dir: Parent directory holding every generated app.
        overwrite: Replace an existing app directory instead of failing.

    Returns:
        The written file paths, in file-set order.

    Raises:
        ScaffoldExistsError: If the app directory exists and *overwrite* is
            ``False``.
        OSError: If a file cannot be written.  The partly written app
            directory is removed before the error propagates.
    """
    app_root = Path(output_dir) / file_set.slug
    if app_root.exists():
        if not overwrite:
            raise ScaffoldExistsError(app_root)
        await asyncio.to_thread(shutil.rmtree, app_root)

    for f in file_set.files:
        _check_relative(f.path)

    written: list[Path] = []
    try:
        for f in file_set.files:
            target = app_root / PurePosixPath(f.path)
            await asyncio.to_thread(_write_file, target, f.content)
            written.append(target)
    except BaseException:
        # no partial app directory is left behind
        await asyncio.to_thread(shutil.rmtree, app_root, ignore_errors=True)
        raise
    return written


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
