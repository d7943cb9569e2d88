"""
DynamoDB Service for item storage.

Handles create, read, partial update and delete of items in a single
table keyed by one string partition key.
"""

import math
from decimal import Decimal, DecimalException
from typing import Any
from uuid import uuid4

import boto3
import structlog
from botocore.exceptions import ClientError
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from items_service.config import Settings, get_settings
from items_service.errors import (
    MISSING_ID_MESSAGE,
    UNSUPPORTED_VALUE_MESSAGE,
    BackendExecutionError,
    InvalidRequest,
    ReservedKeywordConflict,
)
from items_service.update_builder import PartialUpdateBuilder

logger = structlog.get_logger(__name__)

THROTTLING_ERROR_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
    }
)


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def _is_throttled(error: BaseException) -> bool:
    return isinstance(error, ClientError) and _error_code(error) in THROTTLING_ERROR_CODES


def is_reserved_keyword_error(error: ClientError) -> bool:
    """True if DynamoDB rejected an expression over a reserved attribute name."""
    message = error.response.get("Error", {}).get("Message", "")
    return _error_code(error) == "ValidationException" and "reserved keyword" in message


def to_dynamodb_value(value: Any) -> Any:
    """
    Convert a JSON-decoded value into one boto3 can serialize.

    Floats become Decimals, recursively through lists and mappings.

    Raises:
        InvalidRequest: For NaN or infinite numbers
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidRequest(UNSUPPORTED_VALUE_MESSAGE)
        return Decimal(repr(value))
    if isinstance(value, dict):
        return {k: to_dynamodb_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dynamodb_value(v) for v in value]
    return value


class ItemTableService:
    """
    Service for managing items in Amazon DynamoDB.

    The table handle is injected so tests can pass a double; use
    ``from_settings`` to build one from configuration.
    """

    def __init__(
        self,
        table: Any,
        primary_key: str = "itemId",
        escape_reserved_words: bool = False,
        max_attempts: int = 3,
        retry_wait: Any = None,
        builder: PartialUpdateBuilder | None = None,
    ):
        """Initialize the service around a boto3 Table resource."""
        self.table = table
        self.primary_key = primary_key
        self.escape_reserved_words = escape_reserved_words
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=5)
        self.builder = builder or PartialUpdateBuilder()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ItemTableService":
        """Create a service backed by a real boto3 table."""
        settings = settings or get_settings()
        return cls(
            table=create_table_resource(settings),
            primary_key=settings.dynamodb.primary_key,
            escape_reserved_words=settings.dynamodb.escape_reserved_words,
            max_attempts=settings.dynamodb.max_attempts,
        )

    def _call(self, operation: str, fn, **kwargs) -> dict[str, Any]:
        """Run a table operation, retrying throttling and mapping failures."""
        retrying = Retrying(
            retry=retry_if_exception(_is_throttled),
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            reraise=True,
        )
        try:
            return retrying(fn, **kwargs)
        except (TypeError, DecimalException) as e:
            # Raised by the boto3 serializer before any request is sent
            logger.warning("Unserializable attribute value", operation=operation, error=str(e))
            raise InvalidRequest(UNSUPPORTED_VALUE_MESSAGE) from e
        except ClientError as e:
            if is_reserved_keyword_error(e):
                logger.warning(
                    "DynamoDB rejected reserved keyword",
                    operation=operation,
                    error=str(e),
                )
                raise ReservedKeywordConflict() from e
            logger.error(
                "DynamoDB operation failed",
                operation=operation,
                code=_error_code(e),
                error=str(e),
            )
            raise BackendExecutionError(operation, e) from e

    def _key(self, item_id: str) -> dict[str, str]:
        if not item_id or not str(item_id).strip():
            raise InvalidRequest(MISSING_ID_MESSAGE)
        return {self.primary_key: item_id}

    def create_item(self, item: dict[str, Any]) -> dict[str, Any]:
        """
        Store a new item under a freshly generated id.

        Any id supplied by the caller is replaced. The put is unconditional.

        Args:
            item: Item attributes

        Returns:
            The stored item, including its id
        """
        stored = to_dynamodb_value(dict(item))
        stored[self.primary_key] = str(uuid4())

        self._call("put_item", self.table.put_item, Item=stored)
        logger.info("Item created", item_id=stored[self.primary_key])
        return stored

    def get_item(self, item_id: str) -> dict[str, Any] | None:
        """
        Retrieve an item by id.

        Returns:
            The item, or None if no item has that id
        """
        response = self._call("get_item", self.table.get_item, Key=self._key(item_id))
        return response.get("Item")

    def list_items(self) -> list[dict[str, Any]]:
        """Scan the whole table, following pagination."""
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {}
        while True:
            response = self._call("scan", self.table.scan, **kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key

        logger.debug("Items listed", count=len(items))
        return items

    def update_item(self, item_id: str, fields: dict[str, Any] | None) -> dict[str, Any]:
        """
        Apply a partial update: only the given fields change.

        Args:
            item_id: Id of the item to update
            fields: Field name to new value

        Returns:
            The updated attributes as reported by DynamoDB

        Raises:
            InvalidRequest: Empty id or fields, or an attempt to change the key
            ReservedKeywordConflict: A field name is a reserved word
            BackendExecutionError: Any other DynamoDB failure
        """
        plan = self.builder.build(item_id, to_dynamodb_value(fields))
        if self.primary_key in plan.fields:
            raise InvalidRequest(
                f"invalid request, the key attribute {self.primary_key} cannot be updated"
            )

        kwargs = plan.to_update_kwargs(
            self.primary_key,
            escape_reserved=self.escape_reserved_words,
        )
        response = self._call("update_item", self.table.update_item, **kwargs)
        logger.info("Item updated", item_id=item_id, fields=plan.fields)
        return response.get("Attributes", {})

    def delete_item(self, item_id: str) -> None:
        """Delete an item. Deleting a missing item is not an error."""
        self._call("delete_item", self.table.delete_item, Key=self._key(item_id))
        logger.info("Item deleted", item_id=item_id)


def create_dynamodb_resource(settings: Settings):
    """Build a boto3 DynamoDB resource from settings."""
    # Only pass credentials if explicitly set (for local dev)
    # In Lambda, use IAM role credentials automatically
    kwargs: dict[str, Any] = {"region_name": settings.aws.region}
    if settings.aws.access_key_id and settings.aws.secret_access_key:
        kwargs["aws_access_key_id"] = settings.aws.access_key_id
        kwargs["aws_secret_access_key"] = settings.aws.secret_access_key
    if settings.dynamodb.endpoint_url:
        kwargs["endpoint_url"] = settings.dynamodb.endpoint_url
    return boto3.resource("dynamodb", **kwargs)


def create_table_resource(settings: Settings):
    """Get the items table from settings."""
    return create_dynamodb_resource(settings).Table(settings.dynamodb.table_name)


def create_table_if_not_exists(settings: Settings | None = None, dynamodb=None) -> bool:
    """
    Create the items table if it doesn't exist.

    Returns:
        True if table was created, False if it already exists
    """
    settings = settings or get_settings()
    dynamodb = dynamodb or create_dynamodb_resource(settings)
    table_name = settings.dynamodb.table_name

    try:
        dynamodb.meta.client.describe_table(TableName=table_name)
        logger.info("DynamoDB table already exists", table=table_name)
        return False

    except ClientError as e:
        if _error_code(e) != "ResourceNotFoundException":
            raise

    table = dynamodb.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": settings.dynamodb.primary_key, "KeyType": "HASH"},
        ],
        AttributeDefinitions=[
            {"AttributeName": settings.dynamodb.primary_key, "AttributeType": "S"},
        ],
        ProvisionedThroughput={
            "ReadCapacityUnits": settings.dynamodb.read_capacity,
            "WriteCapacityUnits": settings.dynamodb.write_capacity,
        },
    )
    table.wait_until_exists()
    logger.info("DynamoDB table created", table=table_name)
    return True
