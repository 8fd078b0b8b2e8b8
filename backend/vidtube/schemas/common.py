"""Response envelope shared by every successful API response"""
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(data: Any = None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    """Build ``{statusCode, data, message, success}``

    Routes that set cookies call ``set_cookie`` on the returned response.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "data": jsonable_encoder(data if data is not None else {}),
            "message": message,
            "success": status_code < 400,
        }
    )
