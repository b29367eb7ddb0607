from decimal import Decimal

import boto3
import pytest

from moto import mock_aws

from globetrotter.data_layer.base import ITINERARIES, TRIPS
from globetrotter.data_layer.dynamodb_client import DynamoDBClient, from_dynamodb_item, to_dynamodb_item
from globetrotter.utils.exceptions import StoreWriteError


def create_table(dynamodb, name):
    table = dynamodb.create_table(
        TableName=name,
        KeySchema=[{'AttributeName': 'id', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'id', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST',
    )
    table.wait_until_exists()
    return table


@pytest.fixture
def dynamodb_tables():
    """
    Pytest fixture that creates mock `trips` and `itineraries` tables with moto's
    `mock_aws`, each keyed by a string `id`.

    Yields:
        dict: Collection name to boto3 Table resource.
    """
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-2')
        yield {
            TRIPS: create_table(dynamodb, 'trips'),
            ITINERARIES: create_table(dynamodb, 'itineraries'),
        }


@pytest.fixture
def client(dynamodb_tables):
    return DynamoDBClient(dynamodb_tables)


@pytest.fixture
def day_document():
    return {
        'id': 'day-1',
        'trip_id': 'trip-1',
        'date': '2026-05-01',
        'title': 'Day 1',
        'order': 0,
        'activities': [
            {'id': 'a1', 'name': 'Ferry', 'cost': 12.5, 'category': 'transport'},
            {'id': 'a2', 'name': 'Picnic', 'cost': 0.0, 'category': None},
        ],
    }


@pytest.mark.unit
def test_number_conversion():
    converted = to_dynamodb_item({'cost': 12.5, 'items': [1.0, {'x': 0.1}], 'name': 'a'})

    assert converted == {'cost': Decimal('12.5'), 'items': [Decimal('1.0'), {'x': Decimal('0.1')}], 'name': 'a'}
    assert from_dynamodb_item(converted) == {'cost': 12.5, 'items': [1, {'x': 0.1}], 'name': 'a'}


@pytest.mark.unit
def test_put_and_get(client, dynamodb_tables, day_document):
    client.put(ITINERARIES, day_document)

    stored = dynamodb_tables[ITINERARIES].get_item(Key={'id': 'day-1'})['Item']
    assert stored['activities'][0]['cost'] == Decimal('12.5')

    document = client.get(ITINERARIES, 'day-1')
    assert document['activities'][0]['cost'] == 12.5
    assert document['order'] == 0
    assert document['activities'][1]['category'] is None


@pytest.mark.unit
def test_get_missing_returns_none(client):
    assert client.get(TRIPS, 'missing') is None


@pytest.mark.unit
def test_unknown_collection(client):
    with pytest.raises(ValueError):
        client.get('photos', 'x')


@pytest.mark.unit
def test_update_returns_new_document(client, day_document):
    client.put(ITINERARIES, day_document)

    document = client.update(ITINERARIES, 'day-1', {'title': 'Arrival', 'activities': []})

    assert document['title'] == 'Arrival'
    assert document['activities'] == []
    assert document['trip_id'] == 'trip-1'


@pytest.mark.unit
def test_update_of_missing_document_fails(client):
    with pytest.raises(StoreWriteError) as excinfo:
        client.update(ITINERARIES, 'missing', {'title': 'x'})

    assert excinfo.value.error_code == 'ConditionalCheckFailedException'
    assert excinfo.value.doc_ids == ['missing']


@pytest.mark.unit
def test_update_many_is_applied_together(client, day_document):
    client.put(ITINERARIES, day_document)
    client.put(ITINERARIES, {**day_document, 'id': 'day-2', 'order': 1, 'activities': []})

    client.update_many(ITINERARIES, {
        'day-1': {'order': 1, 'activities': []},
        'day-2': {'order': 0, 'activities': [{'id': 'a1', 'name': 'Ferry', 'cost': 12.5}]},
    })

    assert client.get(ITINERARIES, 'day-1')['order'] == 1
    assert client.get(ITINERARIES, 'day-2')['activities'][0]['cost'] == 12.5


@pytest.mark.unit
def test_update_many_failure_changes_nothing(client, day_document):
    client.put(ITINERARIES, day_document)

    with pytest.raises(StoreWriteError):
        client.update_many(ITINERARIES, {
            'day-1': {'activities': []},
            'missing-day': {'activities': [{'id': 'a1', 'name': 'Ferry'}]},
        })

    assert len(client.get(ITINERARIES, 'day-1')['activities']) == 2
    assert client.get(ITINERARIES, 'missing-day') is None


@pytest.mark.unit
def test_delete_and_delete_many(client, day_document):
    for n in range(3):
        client.put(ITINERARIES, {**day_document, 'id': f'day-{n}'})

    client.delete(ITINERARIES, 'day-0')
    client.delete_many(ITINERARIES, ['day-1', 'day-2'])

    assert client.query(ITINERARIES) == []


@pytest.mark.unit
def test_query_filters_on_equality(client):
    client.put(TRIPS, {'id': 't1', 'owner_id': 'u1', 'is_public': True})
    client.put(TRIPS, {'id': 't2', 'owner_id': 'u1', 'is_public': False})
    client.put(TRIPS, {'id': 't3', 'owner_id': 'u2', 'is_public': True})

    assert {doc['id'] for doc in client.query(TRIPS, owner_id='u1')} == {'t1', 't2'}
    assert {doc['id'] for doc in client.query(TRIPS, owner_id='u1', is_public=True)} == {'t1'}
    assert len(client.query(TRIPS)) == 3


@pytest.mark.unit
def test_subscribers_see_successful_writes_only(client, day_document):
    events = []
    unsubscribe = client.subscribe(ITINERARIES, events.append)
    trip_events = []
    client.subscribe(TRIPS, trip_events.append)

    client.put(ITINERARIES, day_document)
    client.update(ITINERARIES, 'day-1', {'title': 'Arrival'})
    with pytest.raises(StoreWriteError):
        client.update(ITINERARIES, 'missing', {'title': 'x'})
    client.delete(ITINERARIES, 'day-1')

    assert [(event.kind, event.doc_id) for event in events] == [
        ('put', 'day-1'), ('update', 'day-1'), ('delete', 'day-1'),
    ]
    assert events[1].document['title'] == 'Arrival'
    assert trip_events == []

    unsubscribe()
    unsubscribe()
    client.put(ITINERARIES, day_document)
    assert len(events) == 3


@pytest.mark.unit
def test_failing_listener_does_not_fail_the_write(client, day_document):
    def broken(event):
        raise RuntimeError('listener bug')

    client.subscribe(ITINERARIES, broken)
    client.put(ITINERARIES, day_document)

    assert client.get(ITINERARIES, 'day-1') is not None
