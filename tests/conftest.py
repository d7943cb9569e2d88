"""
Pytest configuration and fixtures for Items Service tests.
"""

import os
import pytest
from unittest.mock import MagicMock

import boto3
from botocore.exceptions import ClientError
from botocore.stub import Stubber
from tenacity import wait_none

# Set test environment variables
os.environ["APP_ENV"] = "development"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["DYNAMODB_TABLE_NAME"] = "test-table"
os.environ["DYNAMODB_PRIMARY_KEY"] = "itemId"


@pytest.fixture
def client_error():
    """Factory for botocore ClientErrors like the ones DynamoDB returns."""
    def make(code: str, message: str = "", operation: str = "UpdateItem") -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": message}}, operation)
    return make


@pytest.fixture
def settings():
    """Create test settings."""
    from items_service.config import Settings
    return Settings()


@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table."""
    table = MagicMock()
    table.put_item = MagicMock(return_value={})
    table.get_item = MagicMock(return_value={})
    table.scan = MagicMock(return_value={"Items": []})
    table.update_item = MagicMock(return_value={"Attributes": {}})
    table.delete_item = MagicMock(return_value={})
    return table


@pytest.fixture
def item_service(mock_dynamodb_table):
    """Create an item service around the mock table, without retry delays."""
    from items_service.services.dynamodb import ItemTableService
    return ItemTableService(
        table=mock_dynamodb_table,
        primary_key="itemId",
        retry_wait=wait_none(),
    )


@pytest.fixture
def client(item_service):
    """Create a test client wired to the mocked item service."""
    from fastapi.testclient import TestClient
    from items_service.api import app, get_item_service

    app.dependency_overrides[get_item_service] = lambda: item_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def stubbed_table():
    """A real boto3 Table whose client answers from a Stubber."""
    dynamodb = boto3.resource(
        "dynamodb",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    table = dynamodb.Table("test-table")
    with Stubber(table.meta.client) as stubber:
        yield table, stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def stubbed_service(stubbed_table):
    """Item service over the stubbed table."""
    from items_service.services.dynamodb import ItemTableService
    table, _ = stubbed_table
    return ItemTableService(table=table, primary_key="itemId", retry_wait=wait_none())
