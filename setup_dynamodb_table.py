#!/usr/bin/env python3
"""
DynamoDB Table Setup Script for GlobeTrotter

Creates one table per document collection (trips and itinerary days), each keyed
by a string `id`. Supports both local DynamoDB (development) and AWS DynamoDB.

Usage:
    python setup_dynamodb_table.py
"""

import sys

import boto3

from botocore.exceptions import ClientError

from globetrotter.config.config import settings


def table_schema(table_name: str) -> dict:
    return {
        'TableName': table_name,
        'KeySchema': [
            {
                'AttributeName': 'id',
                'KeyType': 'HASH',  # Partition key
            },
        ],
        'AttributeDefinitions': [
            {
                'AttributeName': 'id',
                'AttributeType': 'S',
            },
        ],
        'BillingMode': 'PAY_PER_REQUEST',
    }


def get_dynamodb_resource():
    region_name = settings.aws_region
    if settings.use_local_dynamodb:
        endpoint_url = settings.dynamodb_endpoint_url
        print(f'🔗 Local endpoint: {endpoint_url}')
        return boto3.resource(
            'dynamodb',
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_access_key_id='dummy',
            aws_secret_access_key='dummy',
        )
    print('☁️  Using AWS DynamoDB')
    return boto3.resource('dynamodb', region_name=region_name)


def create_table(dynamodb, table_name: str) -> bool:
    """Create one collection table unless it already exists."""
    try:
        try:
            existing_table = dynamodb.Table(table_name)
            existing_table.load()
            print(f"✅ Table '{table_name}' already exists!")
            print(f'📊 Table status: {existing_table.table_status}')
            return True
        except ClientError as e:
            if e.response['Error']['Code'] != 'ResourceNotFoundException':
                raise

        print(f"🔨 Creating table '{table_name}'...")
        table = dynamodb.create_table(**table_schema(table_name))

        print('⏳ Waiting for table to be created...')
        waiter = dynamodb.meta.client.get_waiter('table_exists')
        waiter.wait(TableName=table_name)

        print(f"✅ Table '{table_name}' created successfully!")
        print(f'📊 Table status: {table.table_status}')
        return True

    except ClientError as e:
        if e.response['Error']['Code'] == 'ResourceInUseException':
            print(f"✅ Table '{table_name}' already exists!")
            return True
        print(f"❌ Error creating table '{table_name}': {e}")
        return False


def create_dynamodb_tables() -> bool:
    print(f'📍 Region: {settings.aws_region}')
    print(f'🏠 Local DynamoDB: {settings.use_local_dynamodb}')

    dynamodb = get_dynamodb_resource()
    results = [
        create_table(dynamodb, table_name)
        for table_name in settings.collection_tables.values()
    ]
    return all(results)


def main():
    """Main function to set up the DynamoDB tables."""
    print('=' * 60)
    print('🎯 GlobeTrotter DynamoDB Table Setup')
    print('=' * 60)

    if create_dynamodb_tables():
        print('\n🎉 Setup completed successfully!')
        print('🚀 You can now run your application:')
        print('   python -m globetrotter.main')
    else:
        print('\n💥 Setup failed!')
        print('🔍 Please check the error messages above.')
        sys.exit(1)


if __name__ == '__main__':
    main()
