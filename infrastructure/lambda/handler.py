"""
AWS Lambda handler for the Items Service API.

Uses Mangum to wrap the FastAPI ASGI application for Lambda compatibility.
The image built from Dockerfile.lambda installs items_service as a package.
"""

from mangum import Mangum

from items_service.api import app
from items_service.config import get_settings
from items_service.logging_config import configure_logging

configure_logging(get_settings().log_level, json_output=True)

# API Gateway invokes this through the REST proxy integration
handler = Mangum(app, lifespan="off")
