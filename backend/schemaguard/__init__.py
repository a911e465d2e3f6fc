"""schemaguard: named JSON Schema validators with HTTP-status-coded errors.

Usage:
    from schemaguard import Validator

    validator = Validator("/srv/app/schemas", options={"strip_additional_properties": True})
    await validator.init()
    doc = await validator.validate("user.create", payload)
"""

from schemaguard.engine import ValidationEngine
from schemaguard.errors import (
    HttpStatusError,
    InvalidOperationError,
    NotFoundError,
    SchemaFileNotFoundError,
    SchemaGuardError,
    SchemaIOError,
)
from schemaguard.formats import is_http_url
from schemaguard.loader import SchemaLoader, json_files
from schemaguard.models import Options, SchemaRegistration, ValidationOutcome
from schemaguard.translator import ErrorTranslator
from schemaguard.validator import Validator

__all__ = [
    "Validator",
    "ValidationEngine",
    "SchemaLoader",
    "ErrorTranslator",
    "Options",
    "SchemaRegistration",
    "ValidationOutcome",
    "SchemaGuardError",
    "HttpStatusError",
    "NotFoundError",
    "InvalidOperationError",
    "SchemaIOError",
    "SchemaFileNotFoundError",
    "is_http_url",
    "json_files",
]
