# trainer/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException


class StoreUnavailable(APIException):
    """The record store could not be read or written. Retrying is the caller's decision."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "cannot load/save records."
    default_code = "store_unavailable"


class SessionClosed(APIException):
    """Answers can only be counted against a session that is still open."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Practice session is already closed."
    default_code = "session_closed"
