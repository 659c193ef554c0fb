"""Доменные ошибки. У каждой есть HTTP-статус и машинный код для ответа API."""


class CafeError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    message = "Internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class UnauthenticatedError(CafeError):
    status_code = 401
    code = "UNAUTHENTICATED"
    message = "Unauthorized"


class ForbiddenError(CafeError):
    status_code = 403
    code = "FORBIDDEN"
    message = "Admin access required"


class NotFoundError(CafeError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class ValidationError(CafeError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Invalid request"


class InvalidAmountError(ValidationError):
    code = "INVALID_AMOUNT"
    message = "Invalid amount"


class InvalidSignatureError(CafeError):
    status_code = 400
    code = "INVALID_SIGNATURE"
    message = "Invalid payment signature"


class TotalsMismatchError(CafeError):
    status_code = 400
    code = "TOTALS_MISMATCH"
    message = "Order totals do not match"


class CouponRejectedError(CafeError):
    status_code = 409
    code = "COUPON_REJECTED"

    def __init__(self, reason: str, message: str | None = None):
        super().__init__(message or f"Coupon rejected: {reason}")
        self.code = reason


class CouponLimitReachedError(CouponRejectedError):
    def __init__(self, message: str = "This coupon has reached its usage limit"):
        super().__init__("LIMIT_REACHED", message)


class PricingError(CafeError):
    status_code = 400
    code = "INVALID_COUPON_CONFIGURATION"
    message = "Coupon configuration is invalid"


class GatewayError(CafeError):
    status_code = 500
    code = "GATEWAY_ERROR"
    message = "Failed to create order"


class IdentityProviderError(CafeError):
    status_code = 500
    code = "IDENTITY_PROVIDER_ERROR"
    message = "Identity provider is unavailable"


class OrderCommitError(CafeError):
    status_code = 500
    code = "ORDER_COMMIT_FAILED"
    message = "Failed to create order"


class PartialCommitError(CafeError):
    status_code = 500
    code = "PARTIAL_COMMIT"
    message = "Order transaction could not be rolled back"


class ConfigurationError(CafeError):
    status_code = 500
    code = "CONFIGURATION_ERROR"
    message = "Service is not configured"


class DuplicatePaymentError(CafeError):
    """Платёж уже записан параллельным запросом; order — записанный заказ."""

    status_code = 409
    code = "DUPLICATE_PAYMENT"
    message = "Payment already recorded"

    def __init__(self, order):
        super().__init__()
        self.order = order
