"""
Error taxonomy for the Items Service.

Every failure surfaced to a caller is one of these. The HTTP layer maps
each class to a status code and a fixed, user-facing message.
"""

MISSING_BODY_MESSAGE = "invalid request, you are missing the parameter body"
MISSING_ID_MESSAGE = "invalid request, you are missing the path parameter id"
NO_ARGUMENTS_MESSAGE = "invalid request, no arguments provided"
INVALID_BODY_MESSAGE = "invalid request, the body must be a JSON object"
UNSUPPORTED_VALUE_MESSAGE = "invalid request, an attribute value is not supported by DynamoDB"
RESERVED_RESPONSE = "Error: You're using AWS reserved keywords as attributes"
DYNAMODB_EXECUTION_ERROR = (
    "Error: Execution update, caused a Dynamodb error, "
    "please take a look at your CloudWatch Logs."
)


class ItemsServiceError(Exception):
    """Base class for all service errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(ItemsServiceError):
    """The caller sent something unusable. Never retried."""

    status_code = 400


class ItemNotFound(ItemsServiceError):
    """No item exists under the requested key."""

    status_code = 404

    def __init__(self, item_id: str):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class ReservedKeywordConflict(ItemsServiceError):
    """DynamoDB rejected a field name because it is a reserved word."""

    status_code = 400

    def __init__(self, fields: list[str] | None = None):
        super().__init__(RESERVED_RESPONSE)
        self.fields = fields or []


class BackendExecutionError(ItemsServiceError):
    """Opaque DynamoDB failure."""

    status_code = 500

    def __init__(self, operation: str, cause: Exception | None = None):
        super().__init__(DYNAMODB_EXECUTION_ERROR)
        self.operation = operation
        self.cause = cause
