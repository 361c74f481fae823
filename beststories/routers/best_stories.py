"""Best stories endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Query

from beststories.models.story import StoryDetail
from beststories.services.best_stories import (
    BestStoriesService,
    InvalidPageRequest,
    get_best_stories_service,
)

router = APIRouter(prefix="/beststories", tags=["beststories"])


@router.get("", response_model=list[StoryDetail])
async def list_best_stories(
    page_size: int = Query(
        default=10,
        alias="pageSize",
        description="Number of stories per page (at least 1)",
    ),
    page: int = Query(
        default=1,
        description="1-based page number in upstream rank order",
    ),
    service: BestStoriesService = Depends(get_best_stories_service),
):
    """Get a page of Hacker News best stories, highest score first."""
    try:
        return await service.get_page(page_size, page)
    except InvalidPageRequest as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
