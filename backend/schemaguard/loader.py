"""Schema loader: discovers schema files in a directory and registers them.

Files are enumerated recursively, passed through a filename filter and parsed
as JSON. Each document is registered under its `$id` (or `id`), falling back
to a name derived from its path: `nested/no-id.json` -> `nested.no-id`.

Loading the same name twice overwrites the earlier schema. Callers that load
several directories must keep names disjoint or accept the overwrite.
"""

import asyncio
import json
import os
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Optional

import structlog
from jsonschema.exceptions import SchemaError

from schemaguard.engine import ValidationEngine
from schemaguard.errors import SchemaFileNotFoundError, SchemaIOError
from schemaguard.models import SchemaRegistration

logger = structlog.get_logger()

FilenameFilter = Callable[[str], bool]


def json_files(filename: str) -> bool:
    """Default filter: relative paths ending in `.json`."""
    return PurePosixPath(filename).suffix == ".json"


def derive_name(filename: str) -> str:
    """Registration name for a file without a declared id."""
    stem = PurePosixPath(filename)
    if stem.suffix:
        stem = stem.with_suffix("")
    return ".".join(stem.parts)


def schema_name(schema: Any, filename: str) -> str:
    if isinstance(schema, Mapping):
        declared = schema.get("$id") or schema.get("id")
        if isinstance(declared, str) and declared:
            return declared
    return derive_name(filename)


class SchemaLoader:
    """Loads every matching schema under a directory into an engine."""

    def __init__(self, engine: ValidationEngine, filter: Optional[FilenameFilter] = None):
        self.engine = engine
        self.filter = filter or json_files

    def load(self, base_dir: Path) -> list[SchemaRegistration]:
        """Register all schemas under `base_dir`.

        Args:
            base_dir: Absolute path of an existing directory

        Returns:
            Registrations in filename order

        Raises:
            SchemaIOError: directory missing or unreadable, or a schema file
                could not be read, parsed or accepted by the engine
            SchemaFileNotFoundError: no file passed the filter
        """
        base_dir = Path(base_dir)
        candidates = self._candidates(base_dir, self._list_files(base_dir))
        documents = [(name, self._read(base_dir, name)) for name in candidates]
        return self._register(base_dir, documents)

    async def load_async(self, base_dir: Path) -> list[SchemaRegistration]:
        """Same as `load`, with directory listing and file reads on worker threads."""
        base_dir = Path(base_dir)
        files = await asyncio.to_thread(self._list_files, base_dir)
        candidates = self._candidates(base_dir, files)

        documents = []
        for name in candidates:
            documents.append((name, await asyncio.to_thread(self._read, base_dir, name)))

        return self._register(base_dir, documents)

    # ── Steps ──

    def _list_files(self, base_dir: Path) -> list[str]:
        if not base_dir.exists():
            raise SchemaIOError(f"was unable to read {base_dir}")
        if not base_dir.is_dir():
            raise SchemaIOError(f'"{base_dir}" is not a directory')

        def _raise(error: OSError) -> None:
            raise SchemaIOError(f"was unable to read {base_dir}", cause=error)

        files = []
        # Symlinked directories are listed in dirnames but never descended
        for root, _dirnames, filenames in os.walk(base_dir, onerror=_raise, followlinks=False):
            rel_root = Path(root).relative_to(base_dir)
            for filename in filenames:
                files.append((rel_root / filename).as_posix())

        return sorted(files)

    def _candidates(self, base_dir: Path, files: list[str]) -> list[str]:
        candidates = [f for f in files if self.filter(f)]
        if not candidates:
            raise SchemaFileNotFoundError(f"no schemas found in dir '{base_dir}'")
        return candidates

    def _read(self, base_dir: Path, filename: str) -> Any:
        path = base_dir / filename
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SchemaIOError(f"was unable to load schema {path}", cause=e) from e

    def _register(self, base_dir: Path, documents: list[tuple[str, Any]]) -> list[SchemaRegistration]:
        # Check everything first so a bad file leaves the engine untouched
        for filename, schema in documents:
            try:
                self.engine.check_schema(schema)
            except SchemaError as e:
                raise SchemaIOError(f"invalid schema {base_dir / filename}: {e.message}", cause=e) from e

        registrations = []
        for filename, schema in documents:
            name = schema_name(schema, filename)
            logger.debug(
                "schema_registered",
                name=name,
                path=str(base_dir / filename),
                derived_name=derive_name(filename),
            )
            self.engine.add_schema(schema, name)
            registrations.append(SchemaRegistration(name=name, path=base_dir / filename))

        logger.info("schemas_loaded", base_dir=str(base_dir), count=len(registrations))
        return registrations
