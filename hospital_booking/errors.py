from fastapi import HTTPException


class AppError(HTTPException):
    """HTTPException carrying a machine-readable error code."""

    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, detail: str, code: str = None, status_code: int = None):
        super().__init__(status_code=status_code or self.status_code, detail=detail)
        if code is not None:
            self.code = code


class BadRequestError(AppError):
    status_code = 400
    code = "BAD_REQUEST"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class CouponExpiredError(AppError):
    code = "COUPON_EXPIRED"


class LimitReachedError(AppError):
    code = "LIMIT_REACHED"


class BelowMinimumError(AppError):
    code = "BELOW_MINIMUM"


class ServiceNotApplicableError(AppError):
    code = "SERVICE_NOT_APPLICABLE"


class SpecialtyNotApplicableError(AppError):
    code = "SPECIALTY_NOT_APPLICABLE"


class InvalidTransitionError(AppError):
    code = "INVALID_TRANSITION"
