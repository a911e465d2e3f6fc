"""FastAPI integration: JSON error responses and validated request bodies.

Usage:
    app = FastAPI()
    install_exception_handlers(app)

    @app.post("/users")
    async def create_user(body: dict = Depends(validated_body(validator, "user.create"))):
        ...
"""

import json
from typing import Any, Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from schemaguard.errors import HttpStatusError, SchemaGuardError
from schemaguard.validator import Validator

logger = structlog.get_logger()


async def schema_error_handler(request: Request, exc: SchemaGuardError) -> JSONResponse:
    """Render a classified error as its serialized JSON contract."""
    logger.warning(
        "request_rejected",
        path=request.url.path,
        method=request.method,
        status=exc.status_code,
        error_type=exc.name,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SchemaGuardError, schema_error_handler)


def validated_body(
    validator: Validator,
    schema: str,
    *,
    lenient: bool = False,
) -> Callable[[Request], Awaitable[Any]]:
    """Dependency returning the request's JSON body validated against `schema`.

    Args:
        validator: Initialized Validator
        schema: Registration name to validate against
        lenient: Use `filter` instead of `validate`, accepting bodies whose
            only problem is undeclared properties
    """

    async def dependency(request: Request) -> Any:
        raw = await request.body()
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise HttpStatusError(400, "request body is not valid JSON", cause=e) from e

        if lenient:
            return await validator.filter(schema, payload)
        return await validator.validate(schema, payload)

    return dependency
