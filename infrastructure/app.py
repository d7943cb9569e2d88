#!/usr/bin/env python3
"""
CDK Application entry point.

Deploy with: cdk deploy --all
"""

import os

import aws_cdk as cdk

from stack import ItemsTableStack, ItemsApiStack


def main():
    """Create and configure the CDK app."""
    app = cdk.App()

    # Get environment from context or default to 'dev'
    environment = app.node.try_get_context("environment") or "dev"

    # Configure AWS environment
    env = cdk.Environment(
        account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
        region=os.environ.get("CDK_DEFAULT_REGION", "us-east-1"),
    )

    table_stack = ItemsTableStack(
        app,
        f"ItemsTableStack-{environment}",
        environment=environment,
        env=env,
        description=f"Items Service table ({environment})",
    )

    ItemsApiStack(
        app,
        f"ItemsApiStack-{environment}",
        table_stack=table_stack,
        environment=environment,
        env=env,
        description=f"Items Service API ({environment})",
    )

    # Add tags to all resources
    cdk.Tags.of(app).add("Project", "ItemsService")
    cdk.Tags.of(app).add("Environment", environment)
    cdk.Tags.of(app).add("ManagedBy", "CDK")

    app.synth()


if __name__ == "__main__":
    main()
