"""
Response writers: every body the API produces is JSON.

Success bodies are the serialized result value; failures use the envelope
``{"error": "<message>"}`` with the error's own status code.
"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def write_json(data: Any, status_code: int = 200) -> JSONResponse:
    """Serialize ``data`` (models, dataclasses, datetimes...) as a JSON response."""
    return JSONResponse(content=jsonable_encoder(data, by_alias=True), status_code=status_code)


def error_response(message: str, status_code: int) -> JSONResponse:
    """Write the uniform error envelope."""
    return JSONResponse(content={"error": message}, status_code=status_code)
