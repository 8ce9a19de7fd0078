from rest_framework import status
from rest_framework.exceptions import APIException


class BusinessRuleError(APIException):
    """
    Raised by service functions when a business rule blocks an operation
    (insufficient stock, delete guards, wrong state...). DRF renders it as
    ``{"error": message}`` with HTTP 400 and the surrounding atomic block is
    rolled back.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'business_rule'

    def __init__(self, message, code=None):
        self.message = message
        super().__init__(detail={'error': message}, code=code)

    def __str__(self):
        return str(self.message)
