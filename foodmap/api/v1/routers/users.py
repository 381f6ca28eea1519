# foodmap/api/v1/routers/users.py
from __future__ import annotations
from typing import Annotated, Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query

from foodmap.api.deps import user_service
from foodmap.domain.services.user_svc import UserService

router = APIRouter(prefix="/users", tags=["users"])

UserSvc = Annotated[UserService, Depends(user_service)]


@router.get("", summary="Search users")
async def get_users(
    svc: UserSvc,
    query: str = Query("", description="Full-text search over name and email"),
    fields: Optional[str] = Query(None, description="Comma-separated fields to return"),
    limit: int = Query(0, ge=0),
    skip: int = Query(0, ge=0),
):
    users = await svc.find(query, fields, limit, skip)
    return {"data": {"users": users}}


@router.post("", summary="Create a user")
async def post_user(svc: UserSvc, payload: Dict[str, Any] = Body(...)):
    """Body: name (required, max 50), email (required)."""
    return {"id": await svc.create_one(payload)}


@router.get("/{user_id}", summary="Get a user")
async def get_user(svc: UserSvc, user_id: str, fields: Optional[str] = Query(None)):
    return {"data": {"user": await svc.find_one_by_id(user_id, fields)}}


@router.put("/{user_id}", summary="Update a user")
async def put_user(svc: UserSvc, user_id: str, payload: Dict[str, Any] = Body(...)):
    payload["id"] = user_id
    await svc.update_one(payload)
    return {"id": user_id}


@router.delete("/{user_id}", summary="Delete a user")
async def delete_user(svc: UserSvc, user_id: str):
    await svc.delete_one(user_id)
    return {"deleted_id": user_id}
