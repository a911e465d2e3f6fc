"""Validation Engine: registry of named JSON Schemas backed by jsonschema.

Schemas are stored by registration name and compiled lazily into jsonschema
validators. The draft is picked from each schema's `$schema` (2020-12 when
absent), and every registered schema is reachable from the others through
`$ref` by its registration name.

Usage:
    engine = ValidationEngine(Options(apply_defaults=True))
    engine.add_schema({"type": "object"}, "custom")
    validator = engine.get_schema("custom")
    errors = engine.run(validator, {"some": "data"})
"""

import copy
import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Optional

import structlog
from jsonschema import Draft202012Validator, validators
from jsonschema.exceptions import SchemaError, ValidationError as EngineError
from jsonschema.protocols import Validator as CompiledValidator
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012, specification_with

from schemaguard.formats import build_format_checker
from schemaguard.models import Options

logger = structlog.get_logger()

ADDITIONAL_PROPERTIES = "additionalProperties"
ADDITIONAL_PROPERTIES_MESSAGE = "must NOT have additional properties"


class ValidationEngine:
    """Compiles and runs named schemas.

    The option-dependent keywords (`properties` for defaults,
    `additionalProperties` for stripping/tolerating extras) are swapped in on
    an extended copy of each draft's validator class.
    """

    def __init__(self, options: Optional[Options] = None):
        self.options = options or Options()
        self.format_checker = build_format_checker()
        self._schemas: dict[str, Any] = {}
        self._registry: Registry = Registry()
        self._compiled: dict[str, CompiledValidator] = {}
        self._classes: dict[type, type] = {}

    @property
    def schema_names(self) -> list[str]:
        return list(self._schemas)

    def add_schema(self, schema: Any, name: str) -> None:
        """Register `schema` under `name`, replacing any previous one.

        Raises:
            jsonschema.exceptions.SchemaError: schema fails its meta-schema
        """
        self.check_schema(schema)

        if name in self._schemas:
            logger.debug("schema_overwritten", name=name)

        self._schemas[name] = schema
        self._registry = self._registry.with_resource(name, _resource_for(schema))
        # Compiled validators hold the old registry
        self._compiled.clear()

    def check_schema(self, schema: Any) -> None:
        if not isinstance(schema, (Mapping, bool)):
            raise SchemaError(f"schema must be an object or a boolean, not {type(schema).__name__}")
        self._validator_class(schema).check_schema(schema)

    def get_schema(self, name: str) -> Optional[CompiledValidator]:
        """Compiled validator for `name`, or None when nothing is registered."""
        if name not in self._schemas:
            return None

        compiled = self._compiled.get(name)
        if compiled is None:
            schema = self._schemas[name]
            cls = self._validator_class(schema)
            compiled = cls(schema, registry=self._registry, format_checker=self.format_checker)
            self._compiled[name] = compiled

        return compiled

    def run(self, validator: CompiledValidator, data: Any) -> list[EngineError]:
        """Validate `data`, returning raw engine errors (empty when valid).

        Defaults and stripping are applied to `data` in place while running.
        Exceptions other than validation failures propagate to the caller.
        """
        errors = validator.iter_errors(data)
        if self.options.collect_all_errors:
            return list(errors)

        first = next(errors, None)
        return [first] if first is not None else []

    # ── Error formatting ──

    @staticmethod
    def instance_path(error: EngineError) -> str:
        """JSON pointer to the failing value ("" for the document root)."""
        return "".join(
            "/" + str(part).replace("~", "~0").replace("/", "~1")
            for part in error.absolute_path
        )

    @classmethod
    def errors_text(cls, errors: Iterable[EngineError]) -> str:
        """One human-readable line covering all errors."""
        text = ", ".join(f"data{cls.instance_path(e)} {e.message}" for e in errors)
        return text or "No errors"

    # ── Validator classes ──

    def _validator_class(self, schema: Any) -> type:
        base = validators.validator_for(schema, default=Draft202012Validator)
        cls = self._classes.get(base)
        if cls is None:
            cls = self._extend(base)
            self._classes[base] = cls
        return cls

    def _extend(self, base: type) -> type:
        options = self.options
        validate_properties = base.VALIDATORS["properties"]
        validate_additional = base.VALIDATORS[ADDITIONAL_PROPERTIES]

        def properties(validator, properties, instance, schema):
            if options.apply_defaults and validator.is_type(instance, "object"):
                for prop, subschema in properties.items():
                    if isinstance(subschema, Mapping) and "default" in subschema and prop not in instance:
                        instance[prop] = copy.deepcopy(subschema["default"])

            yield from validate_properties(validator, properties, instance, schema)

        def additional_properties(validator, additional, instance, schema):
            if additional is not False or not validator.is_type(instance, "object"):
                yield from validate_additional(validator, additional, instance, schema)
                return

            if options.allow_additional_properties:
                return

            extras = list(_extra_properties(instance, schema))
            if options.strip_additional_properties:
                for prop in extras:
                    del instance[prop]
                return

            for prop in extras:
                error = EngineError(ADDITIONAL_PROPERTIES_MESSAGE)
                error.params = {"additionalProperty": prop}
                yield error

        return validators.extend(
            base,
            {"properties": properties, ADDITIONAL_PROPERTIES: additional_properties},
        )


def _extra_properties(instance: Mapping, schema: Mapping) -> Iterator[str]:
    declared = schema.get("properties", {})
    patterns = schema.get("patternProperties", {})
    for prop in instance:
        if prop in declared:
            continue
        if any(re.search(pattern, prop) for pattern in patterns):
            continue
        yield prop


def _resource_for(schema: Any) -> Resource:
    dialect = schema.get("$schema", "") if isinstance(schema, Mapping) else ""
    specification = specification_with(dialect, default=DRAFT202012)
    return specification.create_resource(schema)
