"""Shared tag router — tags other users shared with the caller."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError

from tagsync.dependencies import get_current_user_id, get_sharing_service, get_sync_service
from tagsync.models.tag import (
    TagCreate,
    TagDetailsUpdate,
    TagIdsRequest,
    TagRead,
    TagSoftDelete,
)
from tagsync.routers.tags import raise_for_rejection
from tagsync.services.sharing import SharingService
from tagsync.services.sync import SyncService

router = APIRouter(prefix="/api/shared-tags", tags=["shared-tags"])


@router.post("", response_model=TagRead, status_code=201)
async def add_shared_tag(
    body: TagCreate,
    user_id: str = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
) -> dict:
    try:
        doc = sharing.add_shared(
            body.device_id, body.local_id, user_id, body.text, body.enc_key,
            body.enc_config, body.create_ts, body.schema_version, tag_id=body.id,
        )
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Shared tag id already exists")
    if doc is None:
        raise HTTPException(status_code=422, detail="Incomplete shared tag")
    return doc


@router.post("/query", response_model=list[TagRead])
async def shared_tags_by_ids(
    body: TagIdsRequest,
    _user_id: str = Depends(get_current_user_id),
    sync: SyncService = Depends(get_sync_service),
) -> list[dict]:
    return sync.fetch_shared_by_ids(body.ids)


@router.post("/from/{sharer_id}", response_model=list[TagRead])
async def shared_tags_from_user(
    sharer_id: str,
    body: TagIdsRequest,
    _user_id: str = Depends(get_current_user_id),
    sync: SyncService = Depends(get_sync_service),
) -> list[dict]:
    """Tags among ``ids`` that ``sharer_id`` is currently showing."""
    return sync.fetch_shared_by_user_filtered(sharer_id, body.ids)


@router.get("/{tag_id}", response_model=TagRead)
async def get_shared_tag(
    tag_id: str,
    user_id: str = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
) -> dict:
    doc = sharing.get_shared(user_id, tag_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Shared tag not found")
    return doc


@router.put("/{tag_id}")
async def update_shared_tag(
    tag_id: str,
    body: TagDetailsUpdate,
    user_id: str = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
) -> dict:
    result = sharing.update_shared_details(
        user_id, tag_id, body.text, body.enc_key, body.enc_config,
        body.update_ts, body.schema_version,
    )
    raise_for_rejection(result)
    return {"updated": True, "updateTs": result.timestamp}


@router.post("/{tag_id}/delete")
async def soft_delete_shared_tag(
    tag_id: str,
    body: TagSoftDelete,
    user_id: str = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
) -> dict:
    result = sharing.soft_delete_shared(user_id, tag_id, body.delete_ts)
    raise_for_rejection(result)
    return {"deleted": True}


@router.delete("/{tag_id}", status_code=204)
async def hard_delete_shared_tag(
    tag_id: str,
    user_id: str = Depends(get_current_user_id),
    sharing: SharingService = Depends(get_sharing_service),
) -> None:
    if not sharing.hard_delete_shared(user_id, tag_id):
        raise HTTPException(status_code=404, detail="Shared tag not found")
