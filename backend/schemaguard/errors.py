"""Error taxonomy: classified failures and their serialized JSON contract.

Every failure the library reports is a SchemaGuardError subclass carrying a
machine-readable name, a status code and an optional list of field-level
sub-errors. Serialization is defined here, on the errors themselves:

    {
        "name": "HttpStatusError",
        "message": "custom validation failed: ...",
        "status": 417, "statusCode": 417, "status_code": 417,
        "errors": [{"name": ..., "message": ..., "status": 400, ..., "field": "/extraneous"}]
    }
"""

from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorPayload(BaseModel):
    """Wire shape of a serialized error. All three status keys mirror one value."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    message: str
    status: int
    status_code_alias: int = Field(alias="statusCode")
    status_code: int
    field: Optional[str] = None
    errors: Optional[list["ErrorPayload"]] = None


class SchemaGuardError(Exception):
    """Base class for every classified failure."""

    name: ClassVar[str] = "SchemaGuardError"
    default_status: ClassVar[int] = 500

    def __init__(
        self,
        message: str = "",
        *,
        status_code: Optional[int] = None,
        field: Optional[str] = None,
        cause: Optional[BaseException] = None,
        doc: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status
        self.field = field
        self.errors: list[SchemaGuardError] = []
        # Input that failed, kept for inspection; never serialized
        self.doc = doc
        if cause is not None:
            self.__cause__ = cause

    @property
    def status(self) -> int:
        return self.status_code

    @status.setter
    def status(self, value: int) -> None:
        self.status_code = value

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__

    def add_error(self, error: "SchemaGuardError") -> "SchemaGuardError":
        """Append a field-level sub-error. Returns self for chaining."""
        self.errors.append(error)
        return self

    # ── Serialization ──

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(
            name=self.name,
            message=self.message,
            status=self.status_code,
            status_code_alias=self.status_code,
            status_code=self.status_code,
            field=self.field or None,
            errors=[e.to_payload() for e in self.errors] or None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stable JSON contract (unset field/errors omitted)."""
        return self.to_payload().model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.to_payload().model_dump_json(by_alias=True, exclude_none=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class HttpStatusError(SchemaGuardError):
    """Data failed schema checks (400), or only had undeclared properties (417)."""

    name = "HttpStatusError"
    default_status = 400

    def __init__(self, status_code: int, message: str = "", field: Optional[str] = None, **kwargs: Any):
        super().__init__(message, status_code=status_code, field=field, **kwargs)


class NotFoundError(SchemaGuardError):
    """No validator is registered under the requested name."""

    name = "NotFoundError"
    default_status = 404


class InvalidOperationError(SchemaGuardError):
    """The validation engine itself raised while running a validator."""

    name = "InvalidOperationError"
    default_status = 500


class SchemaIOError(SchemaGuardError):
    """Schema directory missing, not a directory, or unreadable."""

    name = "IOError"
    default_status = 500


class SchemaFileNotFoundError(SchemaIOError):
    """Schema directory exists but no file passed the filename filter."""

    name = "FileNotFoundError"
    default_status = 404
