"""
AWS CDK Stacks for the Items Service.

Creates the AWS resources for the items API:
- DynamoDB table keyed by a string item id
- Lambda function running the FastAPI app through Mangum
- API Gateway REST API with CORS preflight on every resource
"""

from constructs import Construct
from aws_cdk import (
    Stack,
    Duration,
    RemovalPolicy,
    CfnOutput,
    aws_dynamodb as dynamodb,
    aws_lambda as lambda_,
    aws_apigateway as apigw,
    aws_logs as logs,
)

PRIMARY_KEY = "itemId"

CORS_ALLOW_HEADERS = [
    "Content-Type",
    "X-Amz-Date",
    "Authorization",
    "X-Api-Key",
    "X-Amz-Security-Token",
    "X-Amz-User-Agent",
]
CORS_ALLOW_METHODS = ["OPTIONS", "GET", "PUT", "POST", "PATCH", "DELETE"]


class ItemsTableStack(Stack):
    """
    CDK Stack for the items table.

    Kept apart from the API so the data outlives API redeployments.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str = "dev",
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        prefix = f"items-{environment}"

        self.items_table = dynamodb.Table(
            self,
            "ItemsTable",
            table_name=f"{prefix}-items",
            partition_key=dynamodb.Attribute(
                name=PRIMARY_KEY,
                type=dynamodb.AttributeType.STRING,
            ),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            # Non-prod tables are dropped together with their data on destroy
            removal_policy=RemovalPolicy.RETAIN if environment == "prod" else RemovalPolicy.DESTROY,
            point_in_time_recovery=environment == "prod",
        )

        CfnOutput(
            self,
            "TableName",
            value=self.items_table.table_name,
            description="DynamoDB table for items",
            export_name=f"{prefix}-table-name",
        )


class ItemsApiStack(Stack):
    """
    CDK Stack for the Lambda-based items API.

    Deploys the API as one Lambda function behind API Gateway.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        table_stack: ItemsTableStack,
        environment: str = "dev",
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        prefix = f"items-{environment}"

        # Lambda function for the API using Docker for proper dependency bundling
        self.api_function = lambda_.DockerImageFunction(
            self,
            "ApiFunction",
            function_name=f"{prefix}-api",
            code=lambda_.DockerImageCode.from_image_asset(
                directory="..",  # Project root (parent of infrastructure/)
                file="Dockerfile.lambda",
                exclude=[
                    "cdk.out",
                    "infrastructure/cdk.out",
                    ".venv",
                    "venv",
                    ".git",
                    "__pycache__",
                    "*.pyc",
                    ".pytest_cache",
                    "tests",
                    ".env",
                    "*.egg-info",
                ],
            ),
            timeout=Duration.seconds(30),
            memory_size=512,
            environment={
                "DYNAMODB_TABLE_NAME": table_stack.items_table.table_name,
                "DYNAMODB_PRIMARY_KEY": PRIMARY_KEY,
                "APP_ENV": "production" if environment == "prod" else "development",
                "LOG_LEVEL": "INFO",
            },
            log_retention=logs.RetentionDays.ONE_WEEK,
        )

        table_stack.items_table.grant_read_write_data(self.api_function)

        # API Gateway
        self.api = apigw.RestApi(
            self,
            "ItemsApi",
            rest_api_name=f"{prefix}-service",
            description="Items Service",
            deploy_options=apigw.StageOptions(
                stage_name=environment,
                throttling_rate_limit=100,
                throttling_burst_limit=200,
            ),
            default_cors_preflight_options=apigw.CorsOptions(
                allow_origins=apigw.Cors.ALL_ORIGINS,
                allow_methods=CORS_ALLOW_METHODS,
                allow_headers=CORS_ALLOW_HEADERS,
                allow_credentials=False,
            ),
        )

        lambda_integration = apigw.LambdaIntegration(self.api_function)

        # /items
        items_resource = self.api.root.add_resource("items")
        items_resource.add_method("GET", lambda_integration)
        items_resource.add_method("POST", lambda_integration)

        # /items/{item_id}
        item_resource = items_resource.add_resource("{item_id}")
        item_resource.add_method("GET", lambda_integration)
        item_resource.add_method("PATCH", lambda_integration)
        item_resource.add_method("DELETE", lambda_integration)

        health_resource = self.api.root.add_resource("health")
        health_resource.add_method("GET", lambda_integration)

        # Outputs
        CfnOutput(
            self,
            "ApiUrl",
            value=self.api.url,
            description="API Gateway URL",
            export_name=f"{prefix}-api-url",
        )
