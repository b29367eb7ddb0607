import copy
import datetime as dt

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pytest

from globetrotter.config.config_models import Settings as AppConfig
from globetrotter.data_layer.base import ChangeEvent, DocumentStore
from globetrotter.models.itinerary import Activity, ItineraryDay
from globetrotter.services.itinerary_service import ItineraryService
from globetrotter.services.search_service import SearchService
from globetrotter.services.trip_service import TripService
from globetrotter.utils.exceptions import StoreWriteError


class InMemoryDocumentStore(DocumentStore):
    """
    Document store kept in dictionaries.

    Writes touching an id listed in `fail_ids` raise StoreWriteError before
    anything changes, which lets tests simulate a failing backend.
    """

    def __init__(self):
        super().__init__()
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.fail_ids: set = set()
        self.write_count = 0

    def _docs(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(collection, {})

    def _check_writable(self, collection: str, doc_ids: Iterable[str]) -> None:
        failing = [doc_id for doc_id in doc_ids if doc_id in self.fail_ids]
        if failing:
            raise StoreWriteError('Injected write failure', collection, failing, 'InjectedFailure')

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        document = self._docs(collection).get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    def put(self, collection: str, document: Mapping[str, Any]) -> None:
        self._check_writable(collection, [document['id']])
        self._docs(collection)[document['id']] = copy.deepcopy(dict(document))
        self.write_count += 1
        self._notify(ChangeEvent(collection, document['id'], 'put', copy.deepcopy(dict(document))))

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_writable(collection, [doc_id])
        docs = self._docs(collection)
        if doc_id not in docs:
            raise StoreWriteError('Document does not exist', collection, [doc_id], 'ConditionalCheckFailedException')
        docs[doc_id].update(copy.deepcopy(dict(fields)))
        self.write_count += 1
        document = copy.deepcopy(docs[doc_id])
        self._notify(ChangeEvent(collection, doc_id, 'update', document))
        return document

    def update_many(self, collection: str, updates: Mapping[str, Mapping[str, Any]]) -> None:
        if not updates:
            return
        self._check_writable(collection, updates)
        docs = self._docs(collection)
        missing = [doc_id for doc_id in updates if doc_id not in docs]
        if missing:
            raise StoreWriteError('Document does not exist', collection, missing, 'TransactionCanceledException')
        for doc_id, fields in updates.items():
            docs[doc_id].update(copy.deepcopy(dict(fields)))
        self.write_count += 1
        for doc_id in updates:
            self._notify(ChangeEvent(collection, doc_id, 'update', None))

    def delete(self, collection: str, doc_id: str) -> None:
        self._check_writable(collection, [doc_id])
        self._docs(collection).pop(doc_id, None)
        self.write_count += 1
        self._notify(ChangeEvent(collection, doc_id, 'delete', None))

    def delete_many(self, collection: str, doc_ids: Iterable[str]) -> None:
        doc_ids = list(doc_ids)
        self._check_writable(collection, doc_ids)
        for doc_id in doc_ids:
            self._docs(collection).pop(doc_id, None)
            self._notify(ChangeEvent(collection, doc_id, 'delete', None))
        self.write_count += 1

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        return [
            copy.deepcopy(document)
            for document in self._docs(collection).values()
            if all(document.get(name) == value for name, value in equals.items())
        ]


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def itinerary_service(store) -> ItineraryService:
    return ItineraryService(store)


@pytest.fixture
def trip_service(store, itinerary_service) -> TripService:
    return TripService(store, itinerary_service)


@pytest.fixture
def search_service(store) -> SearchService:
    return SearchService(store)


@pytest.fixture
def make_activity():
    """A factory fixture building activities with readable defaults."""
    def _make(name: str, cost: Optional[float] = 0.0, category: Optional[str] = None, **kwargs) -> Activity:
        return Activity(id=kwargs.pop('id', name.lower()), name=name, cost=cost, category=category, **kwargs)
    return _make


@pytest.fixture
def make_day():
    """A factory fixture building itinerary days of one trip."""
    def _make(title: str, order: int, activities: Optional[List[Activity]] = None, trip_id: str = 'trip-1', **kwargs) -> ItineraryDay:
        return ItineraryDay(
            id=kwargs.pop('id', title.lower()),
            trip_id=trip_id,
            date=kwargs.pop('date', dt.date(2026, 5, 1) + dt.timedelta(days=order)),
            title=title,
            order=order,
            activities=activities or [],
            **kwargs,
        )
    return _make


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """
    Provides a temporary directory for config files.
    """
    config_dir = tmp_path / "globetrotter" / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def create_yaml_file():
    """
    A factory fixture to create YAML files in a given directory.
    """
    def _create_yaml(directory: Path, filename: str, content: Dict[str, Any]) -> Path:
        filepath = directory / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w") as f:
            import yaml
            yaml.dump(content, f)
        return filepath
    return _create_yaml


@pytest.fixture
def set_env(monkeypatch: pytest.MonkeyPatch):
    """
    A fixture to temporarily set environment variables for a test.
    """
    def _set_env_vars(env_vars: Dict[str, str]):
        for key, value in env_vars.items():
            monkeypatch.setenv(key, value)
    return _set_env_vars


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch: pytest.MonkeyPatch):
    """Keep the developer's shell from leaking config overrides into tests."""
    monkeypatch.delenv("GLOBETROTTER_CONFIG", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)


@pytest.fixture
def dummy_config_content() -> Dict[str, Any]:
    """Creates a dummy config file."""
    return {
        "app": {
            "name": "globetrotter",
            "env": "dev",
            "version": "0.1.0",
        },
        "budget": {
            "warning_ratio": 0.8,
            "low_remaining_ratio": 0.1,
            "expensive_activity_ratio": 0.2,
            "currency": "USD",
        },
        "trips": {
            "min_name_length": 3,
            "copy_suffix": " (Copy)",
            "default_category": "activity",
        },
        "search": {
            "max_results": 50,
        },
    }


@asynccontextmanager
async def _no_lifespan(_app):
    # Skip real startup/shutdown
    yield


class CurrentUser:
    id = 'user-1'


@pytest.fixture()
def current_user():
    """The authenticated user; tests switch users by assigning `current_user.id`."""
    from globetrotter.main import app
    from globetrotter.utils.auth_utils import get_current_user_id

    user = CurrentUser()
    app.dependency_overrides[get_current_user_id] = lambda: user.id
    yield user
    app.dependency_overrides.pop(get_current_user_id, None)


@pytest.fixture()
def client(monkeypatch, current_user, store, itinerary_service, trip_service, search_service):
    from fastapi.testclient import TestClient

    from globetrotter.main import app

    # Prevent real external initializations
    monkeypatch.setattr(app.router, 'lifespan_context', _no_lifespan, raising=True)
    # Inject services over the in-memory store
    app.state.store = store
    app.state.app_config = AppConfig(app={'name': 'globetrotter', 'env': 'test', 'version': '0.1.0'})
    app.state.itinerary_service = itinerary_service
    app.state.trip_service = trip_service
    app.state.search_service = search_service
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
