"""Translate operation results into HTTP responses."""

from fastapi import status
from fastapi.responses import JSONResponse

from src.models.results import ErrorKind, OperationResult

ERROR_STATUS_CODES = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.SUPERSEDED: status.HTTP_409_CONFLICT,
    ErrorKind.UPSTREAM_UNAVAILABLE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UPSTREAM_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


def status_for(result: OperationResult, success_status: int = status.HTTP_200_OK) -> int:
    if result.success:
        return success_status
    return ERROR_STATUS_CODES.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)


def result_response(
    result: OperationResult, success_status: int = status.HTTP_200_OK
) -> JSONResponse:
    """JSON body of the result with the status code for its error kind."""
    return JSONResponse(
        status_code=status_for(result, success_status),
        content=result.model_dump(mode="json"),
    )
