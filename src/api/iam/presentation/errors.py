"""Translation of gateway errors into HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from iam.ports.exceptions import GatewayError


def error_body(error: GatewayError) -> dict[str, str]:
    return {"detail": error.message, "code": error.code}


async def gateway_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a GatewayError with its class's status code and error code."""
    if not isinstance(exc, GatewayError):
        raise exc
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
