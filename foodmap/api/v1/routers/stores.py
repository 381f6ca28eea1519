# foodmap/api/v1/routers/stores.py
from __future__ import annotations
from typing import Annotated, Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query, Request

from foodmap.api.deps import store_service
from foodmap.core.privilege import resolve_privilege
from foodmap.domain.services.store_svc import StoreService

import logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stores", tags=["stores"])

StoreSvc = Annotated[StoreService, Depends(store_service)]
Privileged = Annotated[bool, Depends(resolve_privilege)]
FieldsQuery = Annotated[Optional[str], Query(description="Comma-separated fields to return; id is always returned")]
LimitQuery = Annotated[int, Query(ge=0, description="Max records, 0 = no limit")]
SkipQuery = Annotated[int, Query(ge=0, description="Records to skip")]


@router.get("", summary="Search stores")
async def get_stores(
    svc: StoreSvc,
    query: str = Query("", description="Full-text search over names, descriptions, categories and menu"),
    categories: Optional[str] = Query(None, description="Comma-separated; only stores having all of them"),
    fields: FieldsQuery = None,
    limit: LimitQuery = 0,
    skip: SkipQuery = 0,
):
    stores = await svc.find(query, categories, fields, limit, skip)
    return {"data": {"stores": stores}}


@router.post("", summary="Create a store")
async def post_store(svc: StoreSvc, payload: Dict[str, Any] = Body(...)):
    """
    Body:
      name            required, max 50
      description     optional, max 1000
      business_hours  required, [{"day": [from, to], "time": ["HH:MM", "HH:MM"]}], Monday=1 .. Sunday=7
      categories      optional, [str]
      price_level     required, one of "cheap", "medium", "expensive"
      menu            [{"name", "description", "category", "price", "variants": [{"name", "price"}]}]
    """
    store_id = await svc.create_one(payload)
    return {"id": store_id}


@router.get("/{store_id}", summary="Get a store")
async def get_store(svc: StoreSvc, store_id: str, fields: FieldsQuery = None):
    """business_hours comes back as 7 lists (Monday first) of [from, to] pairs, plus is_open."""
    store = await svc.find_one_by_id(store_id, fields)
    return {"data": {"store": store}}


@router.put("/{store_id}", summary="Update a store")
async def put_store(svc: StoreSvc, store_id: str, payload: Dict[str, Any] = Body(...)):
    """Fields passed are replaced; menu and business_hours are replaced as a whole."""
    payload["id"] = store_id
    await svc.update_one(payload)
    return {"id": store_id}


@router.delete("/{store_id}", summary="Delete a store")
async def delete_store(svc: StoreSvc, store_id: str):
    await svc.delete_one(store_id)
    return {"deleted_id": store_id}


@router.get("/{store_id}/comments", summary="List a store's comments")
async def get_comments(
    svc: StoreSvc,
    privileged: Privileged,
    store_id: str,
    limit: LimitQuery = 0,
    skip: SkipQuery = 0,
):
    """ip_addr and user_agent are only returned to privileged callers."""
    comments = await svc.find_comments(store_id, privileged, limit, skip)
    return {"data": {"store": {"comments": comments}}}


@router.post("/{store_id}/comments", summary="Comment on a store")
async def post_comment(svc: StoreSvc, store_id: str, request: Request, payload: Dict[str, Any] = Body(...)):
    """
    Body: user_id (required), stars (0..5), message (max 200).
    ip_addr and user_agent default to the caller's own.
    """
    if "ip_addr" not in payload and request.client is not None:
        payload["ip_addr"] = request.client.host
    if "user_agent" not in payload:
        payload["user_agent"] = request.headers.get("user-agent", "")
    comment_id = await svc.create_comment(store_id, payload)
    return {"id": comment_id}


@router.delete("/{store_id}/comments/{comment_id}", summary="Delete a comment")
async def delete_comment(svc: StoreSvc, store_id: str, comment_id: str):
    await svc.delete_comment(store_id, comment_id)
    return {"deleted_id": comment_id}
