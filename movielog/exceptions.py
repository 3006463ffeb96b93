import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class AuthError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized: invalid admin credential."
    default_code = "unauthorized"


class UpstreamError(APIException):
    """The movie metadata provider had no usable answer."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Movie metadata lookup failed."
    default_code = "upstream_error"


class StoreError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "A database error occurred."
    default_code = "store_error"


def exception_handler(exc, context):
    """
    Shape every error as {"error": ..., "details": ...}.

    Database failures become StoreError; anything DRF does not know
    about is logged and reported as a generic 500.
    """
    if isinstance(exc, DatabaseError):
        logger.exception("Store failure while handling %s", _view_name(context))
        exc = StoreError(detail=str(exc) or StoreError.default_detail)

    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled error in %s", _view_name(context))
        return Response(
            {
                "error": "An internal server error occurred.",
                "details": str(exc),
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data = response.data
    if isinstance(data, dict) and set(data) == {"detail"}:
        response.data = {"error": data["detail"], "details": data["detail"]}
    else:
        response.data = {"error": "Invalid request.", "details": data}
    return response


def _view_name(context):
    view = context.get("view")
    return view.__class__.__name__ if view is not None else "unknown view"
