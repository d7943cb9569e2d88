"""
AWS CDK Infrastructure for the Items Service.

Defines the cloud infrastructure using AWS CDK for deploying the items
API with DynamoDB, Lambda and API Gateway.
"""
