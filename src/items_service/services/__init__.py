"""
Services module for the Items Service.

Contains AWS service integrations.
"""

from items_service.services.dynamodb import ItemTableService, create_table_if_not_exists

__all__ = [
    "ItemTableService",
    "create_table_if_not_exists",
]
