import logging

from contextlib import asynccontextmanager

import uvicorn

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from globetrotter.api.routes import budget, itinerary, public, search, trips
from globetrotter.config.config import settings
from globetrotter.config.loader import get_app_config
from globetrotter.config.logger.logger import RequestIDMiddleware, get_request_id, setup_logger
from globetrotter.data_layer.dynamodb_client import DynamoDBClient
from globetrotter.services.itinerary_service import ItineraryService
from globetrotter.services.search_service import SearchService
from globetrotter.services.trip_service import TripService
from globetrotter.utils.exceptions import StoreWriteError


setup_logger()
logger = logging.getLogger(__name__)


def check_aws_credentials() -> None:
    """Fail fast at import time when the real AWS DynamoDB is targeted without keys."""
    if settings.use_local_dynamodb:
        logger.info('Using local DynamoDB at %s, AWS credentials not required', settings.dynamodb_endpoint_url)
        return
    missing = [
        name for name, value in (
            ('AWS_ACCESS_KEY_ID', settings.aws_access_key_id),
            ('AWS_SECRET_ACCESS_KEY', settings.aws_secret_access_key),
        ) if not value
    ]
    if missing:
        error_msg = f'Missing required AWS environment variables: {", ".join(missing)}'
        logger.error('%s. Set USE_LOCAL_DYNAMODB=true to develop against a local table.', error_msg)
        raise RuntimeError(error_msg)


check_aws_credentials()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the document store and hang the shared services on `app.state`."""
    app_config = get_app_config()
    logger.info('Starting %s (%s)', app_config.app.name, app_config.app.env)

    try:
        store = DynamoDBClient()
    except Exception as e:
        logger.error(f'Failed to initialize DynamoDB client: {e}')
        raise RuntimeError(f'DynamoDB initialization failed: {e}') from e
    logger.info(f'DynamoDB tables: {store.table_names}')

    itinerary_service = ItineraryService(store, app_config.trips)
    app.state.app_config = app_config
    app.state.store = store
    app.state.itinerary_service = itinerary_service
    app.state.trip_service = TripService(store, itinerary_service, app_config.trips)
    app.state.search_service = SearchService(store, app_config.search)
    logger.info(f'Serving on http://{settings.host}:{settings.port}')

    yield

    app.state.store = None
    logger.info('GlobeTrotter stopped')


app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=settings.allowed_methods,
    allow_headers=settings.allowed_headers,
)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(StoreWriteError)
async def store_write_exception_handler(request: Request, exc: StoreWriteError):
    """A failed write leaves the stored state as it was; the client may retry."""
    logger.error(f'Store write failed on {exc.collection} {exc.doc_ids}: {exc.message} ({exc.error_code})')
    return JSONResponse(
        status_code=502,
        content={
            'error': 'Storage error',
            'detail': 'The change could not be saved. Please try again.',
            'request_id': get_request_id(),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f'Unhandled exception: {str(exc)}', exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            'error': 'Internal server error',
            'detail': 'An unexpected error occurred.',
            'request_id': get_request_id(),
        },
    )


app.include_router(trips.router, prefix='/api/v1')
app.include_router(itinerary.router, prefix='/api/v1')
app.include_router(budget.router, prefix='/api/v1')
app.include_router(public.router, prefix='/api/v1')
app.include_router(search.router, prefix='/api/v1')


@app.get('/')
async def root():
    """Root endpoint with application information."""
    logger.info('Root endpoint called')
    return {
        'message': 'Welcome to GlobeTrotter',
        'service': settings.app_name,
        'version': settings.app_version,
        'description': settings.app_description,
    }


if __name__ == '__main__':
    uvicorn.run('globetrotter.main:app', host=settings.host, port=settings.port, reload=settings.debug)
