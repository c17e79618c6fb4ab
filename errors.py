class OrderError(Exception):
    status_code = 400
    default_message = "The order request could not be processed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class InvalidRequest(OrderError):
    status_code = 400
    default_message = "The order is missing required data."

class NotFound(OrderError):
    status_code = 404
    default_message = "Order not found."

class AlreadyConfirmed(OrderError):
    status_code = 400
    default_message = "This order has already been confirmed."

class VerificationMismatch(OrderError):
    status_code = 400
    default_message = "The verification code is incorrect."

class InternalError(OrderError):
    status_code = 500
    default_message = "Internal server error."
