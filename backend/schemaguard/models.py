"""Validation models: engine options, registrations and call outcomes."""

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from schemaguard.errors import SchemaGuardError


class Options(BaseModel):
    """Engine behaviour, fixed at construction.

    Unknown keys are rejected so that typos do not silently fall back to defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow_additional_properties: bool = False  # Tolerate extras forbidden by additionalProperties: false
    strip_additional_properties: bool = False  # Delete those extras from the input instead of reporting
    apply_defaults: bool = True                # Fill missing properties from their schema "default"
    collect_all_errors: bool = True            # Report every error, not just the first


class SchemaRegistration(BaseModel):
    """A schema file registered with the engine under `name`."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path


class ValidationOutcome(BaseModel):
    """Result of a non-raising validation call.

    `error` is None on success. `doc` is the caller's input object itself,
    including any defaults or stripping the engine applied.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    doc: Any = None
    error: Optional[SchemaGuardError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
