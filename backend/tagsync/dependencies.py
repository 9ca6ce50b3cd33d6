"""FastAPI dependency injection for caller identity and tag services."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from tagsync.config import get_settings
from tagsync.db import get_session
from tagsync.services.sharing import SharingService
from tagsync.services.sync import SyncService
from tagsync.services.tags import TagNamespace, TagService


def get_current_user_id(request: Request) -> str:
    """Return the caller's user id as forwarded by the authenticating gateway.

    Raises HTTPException 401 if the identity header is missing or blank.
    """
    user_id = request.headers.get(get_settings().user_id_header, "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing user identity")
    return user_id


def get_tag_service(session: Session = Depends(get_session)) -> TagService:
    return TagService(session, TagNamespace.OWNED)


def get_sync_service(session: Session = Depends(get_session)) -> SyncService:
    return SyncService(session)


def get_sharing_service(session: Session = Depends(get_session)) -> SharingService:
    return SharingService(session)
