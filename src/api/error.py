"""API error contract

Use case errors are raised as ClientError and rendered as
{"error": {"code", "message"}} by the app-level handler.
"""

import logging
from typing import Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from libs.result import Error

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    "UNAUTHENTICATED": status.HTTP_401_UNAUTHORIZED,
    "PRODUCT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "VARIANT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ADDRESS_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "SUBSCRIPTION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "WALLET_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_STATUS_TRANSITION": status.HTTP_409_CONFLICT,
    "SUBSCRIPTION_CONFLICT": status.HTTP_409_CONFLICT,
    "IDEMPOTENCY_KEY_CONFLICT": status.HTTP_409_CONFLICT,
}


class ClientError(Exception):
    """
    Error returned to the API client

    Args:
        error: Use case Error (code, message, reason, details)
        status_code: HTTP status; looked up from the error code when omitted.
            Unknown *_FAILED codes map to 500, everything else to 400.
    """

    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        if status_code is None:
            status_code = ERROR_STATUS_CODES.get(error.code)
        if status_code is None:
            status_code = (
                status.HTTP_500_INTERNAL_SERVER_ERROR
                if error.code.endswith("_FAILED")
                else status.HTTP_400_BAD_REQUEST
            )
        self.status_code = status_code


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: "
            f"{exc.error.code} {exc.error.message} ({exc.error.reason})"
        )

    body = {"code": exc.error.code, "message": exc.error.message}
    if exc.error.details:
        body["details"] = exc.error.details

    return JSONResponse(status_code=exc.status_code, content={"error": body})
