from fastapi import Request
from fastapi.responses import JSONResponse


class FunctionError(Exception):
    """Store function failure, answered as {"error": message}."""

    def __init__(self, status_code: int, message: str, fields: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.fields = fields or {}


async def function_error_handler(request: Request, exc: FunctionError) -> JSONResponse:
    body = {"error": exc.message}
    if exc.fields:
        body["fields"] = exc.fields
    return JSONResponse(status_code=exc.status_code, content=body)
