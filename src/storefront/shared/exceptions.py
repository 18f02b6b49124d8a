"""Application error taxonomy.

Handlers raise these at the point a failure is detected; the HTTP boundary in
`storefront.api.errors` maps each one to a status code and a uniform body.
Aggregates keep raising Protean's `ValidationError` for invariant violations.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    USER_NOT_FOUND = 1001
    USER_ALREADY_EXIST = 1002
    INCORRECT_PASSWORD = 1003
    ADDRESS_NOT_FOUND = 1004
    ADDRESS_DOES_NOT_BELONG = 1005
    PRODUCT_NOT_FOUND = 1006
    CART_ITEM_NOT_FOUND = 1007
    ORDER_NOT_FOUND = 1008
    UNPROCESSABLE_ENTITY = 2002
    INTERNAL_EXCEPTION = 3000
    BAD_REQUEST = 4000
    NOT_FOUND = 4004
    CONFLICT = 4009
    UNAUTHORIZED = 420


class StorefrontError(Exception):
    status_code = 400
    default_error_code = ErrorCode.BAD_REQUEST

    def __init__(self, message: str, error_code: ErrorCode | None = None, errors=None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.errors = errors


class BadRequest(StorefrontError):
    """The request is well-formed but violates a domain rule."""


class NotFound(StorefrontError):
    """The entity does not exist or is not visible to the caller."""

    status_code = 404
    default_error_code = ErrorCode.NOT_FOUND


class Unauthenticated(StorefrontError):
    status_code = 401
    default_error_code = ErrorCode.UNAUTHORIZED


class Forbidden(StorefrontError):
    status_code = 403
    default_error_code = ErrorCode.UNAUTHORIZED
