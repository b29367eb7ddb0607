"""
Search endpoint over public trips.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query

from globetrotter.api.dependencies import get_search_service
from globetrotter.models.search import SearchResponse
from globetrotter.services.search_service import SearchService
from globetrotter.utils.auth_utils import get_current_user_id


logger = logging.getLogger(__name__)
router = APIRouter(prefix='/search', tags=['search'])


@router.get('', response_model=SearchResponse, dependencies=[Depends(get_current_user_id)])
def search(
    q: str = Query('', description='Text to look for; blank returns no results'),
    search_type: Literal['cities', 'activities'] = Query('cities', alias='type'),
    search_service: SearchService = Depends(get_search_service),
):
    if search_type == 'cities':
        results = search_service.search_cities(q)
    else:
        results = search_service.search_activities(q)
    return SearchResponse(query=q, search_type=search_type, results=results)
