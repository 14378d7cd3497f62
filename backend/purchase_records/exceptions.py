"""
Domain errors raised by the purchase records services.

Routers never build error bodies; the handlers registered in main.py map
these onto HTTP responses.
"""


class PurchaseRecordsError(Exception):
    """Base class for all service errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PurchaseRecordsError):
    """Submission is missing required fields or has no usable product line"""

    status_code = 400


class UnsupportedMediaType(PurchaseRecordsError):
    """Attached bill has a content type outside the allow-list"""


class PayloadTooLarge(PurchaseRecordsError):
    """Attached bill exceeds the configured size ceiling"""


class PersistenceError(PurchaseRecordsError):
    """Store rejected the write or could not be reached"""
