"""Error translator: turns raw engine output into classified errors.

Classification of one validation call:
    - no validator registered      -> NotFoundError (404)
    - engine raised while running  -> InvalidOperationError (500)
    - no errors                    -> success
    - only extra properties        -> HttpStatusError (417)
    - anything else                -> HttpStatusError (400)

The 417 status marks data that is valid except for undeclared properties, so
lenient callers can accept it without parsing messages.
"""

from collections.abc import Sequence
from typing import Any

import structlog
from jsonschema.exceptions import ValidationError as EngineError

from schemaguard.engine import ADDITIONAL_PROPERTIES, ValidationEngine
from schemaguard.errors import HttpStatusError, InvalidOperationError, NotFoundError
from schemaguard.models import ValidationOutcome

logger = structlog.get_logger()

ONLY_ADDITIONAL_PROPERTIES_STATUS = 417
VALIDATION_FAILED_STATUS = 400


class ErrorTranslator:
    """Runs named validators and classifies their outcome."""

    def __init__(self, engine: ValidationEngine):
        self.engine = engine

    def run(self, schema_name: str, data: Any) -> ValidationOutcome:
        """Validate `data` against `schema_name`. Never raises.

        On success the returned doc is `data` itself, with any defaults or
        stripping already applied.
        """
        validator = self.engine.get_schema(schema_name)
        if validator is None:
            error = NotFoundError(f'validator "{schema_name}" not found', doc=data)
            return ValidationOutcome(doc=data, error=error)

        try:
            raw_errors = self.engine.run(validator, data)
        except Exception as e:
            logger.error("validator_crashed", schema=schema_name, error=str(e), error_type=type(e).__name__)
            error = InvalidOperationError("internal validation error", cause=e, doc=data)
            return ValidationOutcome(doc=data, error=error)

        if not raw_errors:
            return ValidationOutcome(doc=data)

        error = self.classify(schema_name, raw_errors, doc=data)
        logger.debug(
            "validation_failed",
            schema=schema_name,
            status=error.status_code,
            total_errors=len(raw_errors),
        )
        return ValidationOutcome(doc=data, error=error)

    def classify(self, schema_name: str, raw_errors: Sequence[EngineError], doc: Any = None) -> HttpStatusError:
        """Build one HttpStatusError with a sub-error per raw engine error.

        Args:
            schema_name: Name the data was validated against
            raw_errors: Non-empty engine errors, in engine order
            doc: Input that failed, attached to the error for inspection

        Returns:
            Error with status 417 when every raw error is an extra property,
            400 otherwise
        """
        readable = self.engine.errors_text(raw_errors)
        error = HttpStatusError(VALIDATION_FAILED_STATUS, f"{schema_name} validation failed: {readable}", doc=doc)

        only_additional_properties = True
        for raw in raw_errors:
            path = self.engine.instance_path(raw)
            if raw.validator == ADDITIONAL_PROPERTIES:
                prop = raw.params["additionalProperty"]
                field = f"{path}/{prop}"
            else:
                only_additional_properties = False
                field = path

            error.add_error(HttpStatusError(VALIDATION_FAILED_STATUS, raw.message, field))

        if only_additional_properties:
            error.status_code = ONLY_ADDITIONAL_PROPERTIES_STATUS

        return error
