"""
Error bodies shared by the controllers.
"""

from fastapi.responses import JSONResponse


def error_response(status_code: int, message: str, with_success: bool = False) -> JSONResponse:
    """
    JSON error body.

    The AI endpoints answer with ``{"error": ...}``; the storage endpoints
    also carry ``"success": false``.
    """
    content = {"success": False, "error": message} if with_success else {"error": message}
    return JSONResponse(status_code=status_code, content=content)
