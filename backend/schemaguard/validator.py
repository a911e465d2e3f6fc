"""Validator: named JSON Schema validators for request/response payloads.

Usage:
    validator = Validator("/srv/app/schemas")
    await validator.init()

    doc = await validator.validate("custom", payload)   # raises on any failure
    doc = await validator.filter("custom", payload)     # tolerates extra properties (417)
    outcome = validator.validate_sync("custom", payload)
    doc = validator.if_error("custom", payload)         # raises synchronously
"""

from pathlib import Path
from typing import Any, Optional, Union

import structlog

from schemaguard.config import get_settings
from schemaguard.engine import ValidationEngine
from schemaguard.loader import FilenameFilter, SchemaLoader
from schemaguard.models import Options, SchemaRegistration, ValidationOutcome
from schemaguard.translator import ONLY_ADDITIONAL_PROPERTIES_STATUS, ErrorTranslator

logger = structlog.get_logger()

PathLike = Union[str, Path]


class Validator:
    """Loads schemas from a directory and validates data against them by name.

    `init` may be called several times to merge schemas from several
    directories. Names are not namespaced: a later schema with the same name
    replaces the earlier one. Validating against a name that is not loaded yet
    fails with NotFoundError rather than waiting for a pending `init`.
    """

    def __init__(
        self,
        schema_dir: Optional[PathLike] = None,
        filter: Optional[FilenameFilter] = None,
        options: Union[Options, dict, None] = None,
    ):
        """
        Args:
            schema_dir: Default directory for `init`; falls back to SCHEMAGUARD_SCHEMA_DIR
            filter: Predicate over file paths relative to the schema directory
            options: Engine options, as Options or a dict of its fields
        """
        if schema_dir is None:
            schema_dir = get_settings().SCHEMA_DIR
        self.schema_dir = schema_dir

        if options is None:
            options = Options()
        elif not isinstance(options, Options):
            options = Options.model_validate(options)
        self.options = options

        self._engine = ValidationEngine(options)
        self._loader = SchemaLoader(self._engine, filter)
        self._translator = ErrorTranslator(self._engine)

    @property
    def engine(self) -> ValidationEngine:
        """Underlying engine, e.g. to register more schemas by hand."""
        return self._engine

    def load_schema(self, schema: Any, name: str) -> None:
        self._engine.add_schema(schema, name)

    # ── Initialization ──

    async def init(
        self,
        dir: Optional[PathLike] = None,
        *,
        relative_to: Optional[PathLike] = None,
    ) -> list[SchemaRegistration]:
        """Load every schema in `dir` (default: the configured schema_dir).

        Args:
            dir: Schema directory, absolute or relative to `relative_to`
            relative_to: Caller's own location (a directory, or a file whose
                parent is used) for resolving a relative `dir`

        Raises:
            TypeError: neither `dir` nor schema_dir is set
            ValueError: `dir` is relative and `relative_to` is missing
            SchemaIOError / SchemaFileNotFoundError: see SchemaLoader.load
        """
        base_dir = self._resolve_dir(dir, relative_to)
        return await self._loader.load_async(base_dir)

    def init_sync(
        self,
        dir: Optional[PathLike] = None,
        *,
        relative_to: Optional[PathLike] = None,
    ) -> list[SchemaRegistration]:
        """Blocking variant of `init`."""
        base_dir = self._resolve_dir(dir, relative_to)
        return self._loader.load(base_dir)

    def _resolve_dir(self, dir: Optional[PathLike], relative_to: Optional[PathLike]) -> Path:
        if dir is None:
            dir = self.schema_dir
        if dir is None:
            raise TypeError('"dir" or schema_dir must be defined')

        path = Path(dir)
        if path.is_absolute():
            return path

        if relative_to is None:
            raise ValueError(f'"{dir}" is relative; pass an absolute path or relative_to=')

        anchor = Path(relative_to)
        if anchor.is_file():
            anchor = anchor.parent
        return (anchor / path).resolve()

    # ── Validation ──

    async def validate(self, schema: str, data: Any) -> Any:
        """Return `data` if it satisfies `schema`, raise the classified error otherwise."""
        outcome = self._translator.run(schema, data)
        if outcome.error is not None:
            raise outcome.error
        return outcome.doc

    async def filter(self, schema: str, data: Any) -> Any:
        """Like `validate`, but data that only has extra properties (417) is returned.

        With strip_additional_properties the extras are already gone from the
        returned document; otherwise they are left in place.
        """
        outcome = self._translator.run(schema, data)
        if outcome.error is not None and outcome.error.status_code != ONLY_ADDITIONAL_PROPERTIES_STATUS:
            raise outcome.error
        return outcome.doc

    def validate_sync(self, schema: str, data: Any) -> ValidationOutcome:
        """Validate without raising; inspect `outcome.error` (None on success)."""
        return self._translator.run(schema, data)

    def if_error(self, schema: str, data: Any) -> Any:
        """Return `data` if valid, otherwise raise synchronously. No 417 leniency."""
        outcome = self._translator.run(schema, data)
        if outcome.error is not None:
            logger.debug(
                "if_error_failed",
                schema=schema,
                error=outcome.error.to_dict(),
            )
            raise outcome.error
        return outcome.doc
