from fastapi import APIRouter, Depends

from comment_board.dependencies import (
    PaginationParams,
    check_comment_id,
    comment_id_param,
    get_store,
)
from comment_board.errors import NotFound
from comment_board.schemas import ApiResponse, CommentCreate
from comment_board.services.comment_service import CommentStore

router = APIRouter(prefix="/api/comment", tags=["comments"])


@router.get("/get", response_model=ApiResponse)
async def list_comments(
    pagination: PaginationParams = Depends(),
    store: CommentStore = Depends(get_store),
):
    page = await store.list_comments(pagination.page, pagination.size)
    return ApiResponse(data=page)


@router.post("/add", response_model=ApiResponse)
async def add_comment(data: CommentCreate, store: CommentStore = Depends(get_store)):
    comment = await store.create_comment(data)
    return ApiResponse(data=comment)


@router.post("/delete", response_model=ApiResponse)
async def delete_comment(
    comment_id: int = Depends(comment_id_param),
    store: CommentStore = Depends(get_store),
):
    # Single statement: the affected-row count stands in for an existence check.
    if not await store.delete_comment(comment_id):
        raise NotFound(comment_id)
    return ApiResponse(data=None)


@router.get("/{comment_id}", response_model=ApiResponse)
async def get_comment(comment_id: int, store: CommentStore = Depends(get_store)):
    check_comment_id(comment_id)
    return ApiResponse(data=await store.get_comment(comment_id))
