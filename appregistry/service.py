"""App registration service and CLI.

Wires the registry, the scaffold emitter and the configured storage locations
together: a registration request is normalized, committed to the registry,
emitted as a file set, written under ``<output_dir>/<slug>/`` and the registry
file is persisted.
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass, field
from pathlib import Path

from rich.markup import escape

from appregistry.config import Config
from appregistry.registry import (
    AppRecord,
    AppRequest,
    RegistrationError,
    Registry,
    RegistryCorruption,
)
from appregistry.scaffolder import FileSet, ScaffoldEmitter, ScaffoldExistsError, write_file_set
from appregistry.utils import (
    console,
    print_error,
    print_records_table,
    print_success,
    print_summary_table,
    print_warning,
    save_json,
)


@dataclass
class RegistrationResult:
    """Outcome of a single registration."""

    record: AppRecord
    file_set: FileSet
    written: list[Path] = field(default_factory=list)
    dry_run: bool = False


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class RegistrationService:
    """Registers apps and materializes their scaffolds.

    Attributes:
        config: Storage locations, budgets and scaffold options.
        registry: The owned registry, loaded from ``config.registry_path``.
        emitter: Scaffold emitter configured from ``config.scaffold``.
    """

    def __init__(self, config: Config | None = None, registry: Registry | None = None) -> None:
        self.config = config or Config()
        if registry is None:
            registry = Registry.load(
                self.config.registry_path,
                max_description_chars=self.config.limits.description_max_chars,
            )
        self.registry = registry
        self.emitter = ScaffoldEmitter(self.config.scaffold)

    # -- Queries -----------------------------------------------------------

    def list_records(self) -> list[AppRecord]:
        return self.registry.records()

    def get(self, slug: str) -> AppRecord:
        return self.registry[slug]

    # -- Commands ----------------------------------------------------------

    async def register(
        self,
        request: AppRequest,
        *,
        dry_run: bool = False,
        write: bool = True,
        overwrite: bool = False,
    ) -> RegistrationResult:
        """Register *request* and (unless told otherwise) write its scaffold.

        Args:
            request: Raw title and description.
            dry_run: Build and emit only; the registry and disk are untouched.
            write: Write the scaffold files after committing.
            overwrite: Replace an existing app directory with the same slug.

        Raises:
            InvalidTitle: If the title has no letters or digits.
            ScaffoldExistsError: If the app directory exists and *overwrite*
                is off.
            OSError: If the scaffold cannot be written.

        A failed write rolls the registration back, so the record is never
        kept without its scaffold.
        """
        if dry_run:
            record = self.registry.preview(request.raw_title, request.raw_description)
            return RegistrationResult(record=record, file_set=self.emitter.emit(record), dry_run=True)

        record = self.registry.register(request.raw_title, request.raw_description)
        file_set = self.emitter.emit(record)

        written: list[Path] = []
        if write:
            try:
                written = await write_file_set(file_set, self.config.output_dir, overwrite=overwrite)
            except BaseException:
                self.registry.deregister(record.slug)
                raise

        await self.save()
        return RegistrationResult(record=record, file_set=file_set, written=written)

    async def emit(self, slug: str, *, overwrite: bool = False) -> list[Path]:
        """(Re)write the scaffold of an already-registered app."""
        record = self.registry[slug]
        file_set = self.emitter.emit(record)
        return await write_file_set(file_set, self.config.output_dir, overwrite=overwrite)

    async def deregister(self, slug: str) -> AppRecord:
        """Remove *slug* from the registry.  Generated files are left in place."""
        record = self.registry.deregister(slug)
        await self.save()
        return record

    async def save(self) -> Path:
        """Persist the registry to ``config.registry_path``."""
        path = self.config.registry_path
        await save_json(self.registry.to_dict(), path)
        return path


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _record_row(record: AppRecord) -> dict[str, object]:
    return record.model_dump()


async def _run(args, config: Config) -> int:
    service = RegistrationService(config)

    if args.command == "register":
        result = await service.register(
            AppRequest(raw_title=args.title, raw_description=args.description),
            dry_run=args.dry_run,
            write=not args.no_write,
            overwrite=args.overwrite,
        )
        record = result.record
        print_summary_table(
            {
                "Slug": record.slug,
                "Title": record.title,
                "Description": record.description,
                "Sequence": str(record.sequence),
                "Files": ", ".join(result.file_set.paths()),
            },
            title="Dry run" if result.dry_run else "Registered app",
        )
        if result.dry_run:
            print_warning("Dry run: nothing was registered or written.")
        else:
            target = config.app_dir(record.slug)
            print_success(
                f"App '{escape(record.title)}' registered as '{record.slug}'"
                + (f" -> {target}" if result.written else "")
            )
        return 0

    if args.command == "list":
        records = service.list_records()
        if not records:
            print_warning("No apps registered.")
            return 0
        print_records_table([_record_row(r) for r in records])
        return 0

    if args.command == "show":
        record = service.get(args.slug)
        print_summary_table(
            {k: str(v) for k, v in _record_row(record).items()},
            title=record.slug,
        )
        return 0

    if args.command == "deregister":
        record = await service.deregister(args.slug)
        print_success(f"Deregistered '{record.slug}'.")
        return 0

    if args.command == "emit":
        written = await service.emit(args.slug, overwrite=args.overwrite)
        for path in written:
            console.print(f"  [dim]{path}[/dim]")
        print_success(f"Wrote {len(written)} files for '{args.slug}'.")
        return 0

    raise AssertionError(f"unhandled command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``appregistry`` / ``python -m appregistry.service``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="appregistry",
        description="Register generated apps and write their scaffolds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            '  appregistry register "BUILD me a" "BUILD me a website for a log tool"\n'
            '  appregistry register "Recipe Box" "Save recipes" --dry-run\n'
            "  appregistry list\n"
            "  appregistry emit build-me-a --overwrite\n"
        ),
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory holding registry.json (default: $APPREG_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory for generated apps (default: $APPREG_OUTPUT_DIR or ./generated-apps)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    reg = sub.add_parser("register", help="Register a new app")
    reg.add_argument("title", help="App title")
    reg.add_argument("description", nargs="?", default="", help="App description / prompt")
    reg.add_argument("--dry-run", action="store_true", help="Preview without committing")
    reg.add_argument("--no-write", action="store_true", help="Register without writing files")
    reg.add_argument("--overwrite", action="store_true", help="Replace an existing app directory")

    sub.add_parser("list", help="List registered apps")

    show = sub.add_parser("show", help="Show one registered app")
    show.add_argument("slug")

    dereg = sub.add_parser("deregister", help="Remove an app from the registry")
    dereg.add_argument("slug")

    emit = sub.add_parser("emit", help="Write the scaffold of a registered app")
    emit.add_argument("slug")
    emit.add_argument("--overwrite", action="store_true", help="Replace an existing app directory")

    args = parser.parse_args(argv)

    config = Config.from_env()
    if args.data_dir:
        config.data_dir = Path(args.data_dir)
    if args.output:
        config.output_dir = Path(args.output)

    try:
        return asyncio.run(_run(args, config))
    except RegistryCorruption as exc:
        print_error(f"Registry is corrupt: {escape(str(exc))}")
        return 2
    except (RegistrationError, ScaffoldExistsError) as exc:
        hint = " (use --overwrite to replace it)" if isinstance(exc, ScaffoldExistsError) else ""
        print_error(f"Error: {escape(str(exc))}{hint}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
