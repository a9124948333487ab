from fastapi import APIRouter, Depends

from comment_board.cache import CacheManager
from comment_board.dependencies import get_cache, get_store
from comment_board.schemas import MetricsResponse
from comment_board.services.comment_service import CommentStore

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
async def get_metrics(
    store: CommentStore = Depends(get_store),
    cache: CacheManager = Depends(get_cache),
):
    return MetricsResponse(
        total_comments=await store.count_comments(),
        cache_info=cache.stats,
    )
