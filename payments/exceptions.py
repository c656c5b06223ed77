class PaymentError(Exception):
    """Base class for failures reported back to the caller as-is."""

    default_message = "The payment could not be processed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class PaymentValidationError(PaymentError):
    default_message = "Invalid payment data"


class PaymentAuthorizationError(PaymentError):
    default_message = "Unauthorized"


class PaymentNotFoundError(PaymentError):
    default_message = "Not found"
