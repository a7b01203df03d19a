# cores/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException


class InvalidState(APIException):
    """The operation is not allowed in the object's current lifecycle state."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Operation not allowed in the current state."
    default_code = "invalid_state"


class DataIntegrityError(InvalidState):
    """Stored data breaks an assumption the caller relies on."""
    default_detail = "Stored data is inconsistent."
    default_code = "data_integrity"
