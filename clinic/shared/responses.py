"""Response envelopes shared by all routers"""

from typing import Any


def api_response(status_code: int, data: Any, message: str = "Success") -> dict:
    """Success envelope: {statusCode, data, message, success}"""
    return {
        "statusCode": status_code,
        "data": data,
        "message": message,
        "success": status_code < 400,
    }


def error_response(status_code: int, message: str, errors: list | None = None) -> dict:
    return {
        "statusCode": status_code,
        "message": message,
        "success": False,
        "errors": errors or [],
    }
