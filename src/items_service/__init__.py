"""
Items Service - REST CRUD API over a DynamoDB table.

Serves items through FastAPI on AWS Lambda and applies partial updates
built by a stateless update-plan builder.
"""

__version__ = "0.1.0"
__author__ = "Developer"

from items_service.config import Settings
from items_service.update_builder import PartialUpdateBuilder

__all__ = ["Settings", "PartialUpdateBuilder", "__version__"]
