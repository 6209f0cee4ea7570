from rest_framework import status
from rest_framework.response import Response

from membership.services.year_service import active_year

# Service result codes and the HTTP status they map to
STATUS_BY_CODE = {
    "confirmation": status.HTTP_400_BAD_REQUEST,
    "invalid": status.HTTP_400_BAD_REQUEST,
    "invalid_state": status.HTTP_400_BAD_REQUEST,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(result: dict) -> Response:
    """Turn a failed service result into an HTTP error response."""
    body = {"message": result["message"]}
    if result.get("errors"):
        body["errors"] = result["errors"]
    http_status = STATUS_BY_CODE.get(result.get("code"), status.HTTP_400_BAD_REQUEST)
    return Response(body, status=http_status)


def member_context() -> dict:
    return {"active_year": active_year()}
