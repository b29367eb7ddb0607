import logging

from decimal import Decimal
from functools import reduce
from typing import Any, Dict, Iterable, List, Mapping, Optional

import boto3

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from globetrotter.config.config import settings
from globetrotter.data_layer.base import ChangeEvent, DocumentStore
from globetrotter.utils.exceptions import StoreWriteError


logger = logging.getLogger(__name__)

# DynamoDB rejects transactions with more items than this
MAX_TRANSACTION_ITEMS = 100


def to_dynamodb_item(obj: Any) -> Any:
    """Recursively convert floats to Decimal, which is the only number type DynamoDB accepts."""
    if isinstance(obj, list):
        return [to_dynamodb_item(item) for item in obj]
    if isinstance(obj, dict):
        return {key: to_dynamodb_item(value) for key, value in obj.items()}
    if isinstance(obj, float):
        return Decimal(str(obj))
    return obj


def from_dynamodb_item(obj: Any) -> Any:
    """Recursively convert DynamoDB Decimal values back to int or float."""
    if isinstance(obj, list):
        return [from_dynamodb_item(item) for item in obj]
    if isinstance(obj, dict):
        return {key: from_dynamodb_item(value) for key, value in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj


def _update_expression(fields: Mapping[str, Any]) -> Dict[str, Any]:
    names = {'#id': 'id'}
    values = {}
    assignments = []
    for position, (name, value) in enumerate(fields.items()):
        names[f'#f{position}'] = name
        values[f':v{position}'] = to_dynamodb_item(value)
        assignments.append(f'#f{position} = :v{position}')
    return {
        'UpdateExpression': 'SET ' + ', '.join(assignments),
        'ConditionExpression': 'attribute_exists(#id)',
        'ExpressionAttributeNames': names,
        'ExpressionAttributeValues': values,
    }


class DynamoDBClient(DocumentStore):
    """
    DynamoDB-backed document store: one table per collection, each keyed by a string `id`.

    Change notifications are delivered in-process after each successful write.
    """

    def __init__(self, tables: Optional[Mapping[str, Any]] = None):
        """
        Initialize the DynamoDB client.

        Args:
            tables: Optional mapping of collection name to an existing boto3 Table resource.
                When omitted, tables are resolved from settings (AWS or local DynamoDB).
        """
        super().__init__()
        if tables is not None:
            self.tables = dict(tables)
        else:
            self.region_name = settings.aws_region

            if settings.use_local_dynamodb:
                endpoint_url = settings.dynamodb_endpoint_url
                self.dynamodb = boto3.resource(
                    'dynamodb',
                    region_name=self.region_name,
                    endpoint_url=endpoint_url,
                    aws_access_key_id='dummy',
                    aws_secret_access_key='dummy',
                )
                logger.info(f'Using local DynamoDB at {endpoint_url}')
            else:
                self.dynamodb = boto3.resource('dynamodb', region_name=self.region_name)
                logger.info(f'Using AWS DynamoDB in region {self.region_name}')

            self.tables = {
                collection: self.dynamodb.Table(table_name)
                for collection, table_name in settings.collection_tables.items()
            }

    @property
    def table_names(self) -> Dict[str, str]:
        return {collection: table.name for collection, table in self.tables.items()}

    def _table(self, collection: str):
        try:
            return self.tables[collection]
        except KeyError:
            raise ValueError(f'Unknown collection: {collection}') from None

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self._table(collection).get_item(Key={'id': doc_id})
        except ClientError as e:
            logger.error(f'Error getting {collection}/{doc_id}: {e.response["Error"]["Message"]}')
            raise
        item = response.get('Item')
        return from_dynamodb_item(item) if item is not None else None

    def put(self, collection: str, document: Mapping[str, Any]) -> None:
        doc_id = document['id']
        try:
            self._table(collection).put_item(Item=to_dynamodb_item(dict(document)))
        except ClientError as e:
            logger.error(f'Failed to put {collection}/{doc_id}: {e.response["Error"]["Message"]}')
            raise StoreWriteError(
                f'Failed to save {collection} document', collection, [doc_id], e.response['Error']['Code']
            ) from e
        self._notify(ChangeEvent(collection, doc_id, 'put', dict(document)))

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            response = self._table(collection).update_item(
                Key={'id': doc_id},
                ReturnValues='ALL_NEW',
                **_update_expression(fields),
            )
        except ClientError as e:
            logger.error(f'Failed to update {collection}/{doc_id}: {e.response["Error"]["Message"]}')
            raise StoreWriteError(
                f'Failed to update {collection} document', collection, [doc_id], e.response['Error']['Code']
            ) from e
        document = from_dynamodb_item(response.get('Attributes', {}))
        self._notify(ChangeEvent(collection, doc_id, 'update', document))
        return document

    def update_many(self, collection: str, updates: Mapping[str, Mapping[str, Any]]) -> None:
        """
        Apply several updates with TransactWriteItems: either every document changes or none does.

        More than MAX_TRANSACTION_ITEMS updates are split into consecutive transactions,
        which are individually atomic only.
        """
        if not updates:
            return
        table = self._table(collection)
        doc_ids = list(updates)
        chunks = [doc_ids[i:i + MAX_TRANSACTION_ITEMS] for i in range(0, len(doc_ids), MAX_TRANSACTION_ITEMS)]
        if len(chunks) > 1:
            logger.warning(f'Splitting {len(doc_ids)} {collection} updates into {len(chunks)} transactions')

        for chunk in chunks:
            # the resource's client accepts plain Python values, like the Table API
            items = [
                {'Update': {'TableName': table.name, 'Key': {'id': doc_id}, **_update_expression(updates[doc_id])}}
                for doc_id in chunk
            ]
            try:
                table.meta.client.transact_write_items(TransactItems=items)
            except ClientError as e:
                logger.error(f'Transactional update of {collection} {chunk} failed: {e.response["Error"]["Message"]}')
                raise StoreWriteError(
                    f'Failed to update {len(chunk)} {collection} documents', collection, chunk,
                    e.response['Error']['Code'],
                ) from e

            for doc_id in chunk:
                self._notify(ChangeEvent(collection, doc_id, 'update', None))

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            self._table(collection).delete_item(Key={'id': doc_id})
        except ClientError as e:
            logger.error(f'Error deleting {collection}/{doc_id}: {e.response["Error"]["Message"]}')
            raise StoreWriteError(
                f'Failed to delete {collection} document', collection, [doc_id], e.response['Error']['Code']
            ) from e
        self._notify(ChangeEvent(collection, doc_id, 'delete', None))

    def delete_many(self, collection: str, doc_ids: Iterable[str]) -> None:
        doc_ids = list(doc_ids)
        if not doc_ids:
            return
        try:
            with self._table(collection).batch_writer() as batch:
                for doc_id in doc_ids:
                    batch.delete_item(Key={'id': doc_id})
        except ClientError as e:
            logger.error(f'Batch delete from {collection} failed: {e.response["Error"]["Message"]}')
            raise StoreWriteError(
                f'Failed to delete {len(doc_ids)} {collection} documents', collection, doc_ids,
                e.response['Error']['Code'],
            ) from e
        for doc_id in doc_ids:
            self._notify(ChangeEvent(collection, doc_id, 'delete', None))

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        """
        Scan a collection, keeping documents whose fields equal all `equals` values.

        Follows LastEvaluatedKey until the whole table has been read.
        """
        table = self._table(collection)
        params: Dict[str, Any] = {}
        if equals:
            conditions = [Attr(name).eq(to_dynamodb_item(value)) for name, value in equals.items()]
            params['FilterExpression'] = reduce(lambda left, right: left & right, conditions)

        items: List[Dict[str, Any]] = []
        try:
            while True:
                response = table.scan(**params)
                items.extend(response.get('Items', []))
                last_key = response.get('LastEvaluatedKey')
                if not last_key:
                    break
                params['ExclusiveStartKey'] = last_key
        except ClientError as e:
            logger.error(f'Error scanning {collection}: {e.response["Error"]["Message"]}')
            raise
        return [from_dynamodb_item(item) for item in items]
