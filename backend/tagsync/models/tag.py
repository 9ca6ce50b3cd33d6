"""Tag models — owned tags, shared tags and their wire schemas.

Attribute names are pythonic; the persisted column names (``_id``, ``dId``,
``tag``, ``encKey`` ...) are the storage contract shared with existing data
and are also the field names used on the wire.
"""
from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlmodel import Field, SQLModel


def _column(name: str, **kwargs):
    return Field(sa_column_kwargs={"name": name}, **kwargs)


class TagBase(SQLModel):
    """Columns shared by the owned and shared tag tables."""

    id: str = Field(
        default_factory=lambda: uuid4().hex,
        primary_key=True,
        sa_column_kwargs={"name": "_id"},
    )
    device_id: str = _column("dId")
    local_id: str = _column("lId")
    user_id: str = _column("userId", index=True)
    text: str = _column("tag", default="")
    enc_key: str = _column("encKey", default="")
    enc_config: str = _column("encConfig", default="")
    deleted: bool = _column("deleted", default=False)
    archived: bool = _column("archived", default=False)
    recycled: bool = _column("recycled", default=False)
    create_ts: int | None = _column("createTs", default=None)
    update_ts: int | None = _column("updateTs", default=None)
    delete_ts: int | None = _column("deleteTs", default=None)
    schema_version: int = _column("schemaVersion", default=1)


class Tag(TagBase, table=True):
    """A tag owned by ``user_id``."""
    __tablename__ = "tags"


class SharedTag(TagBase, table=True):
    """A point-in-time copy of a tag, visible to recipient ``user_id``."""
    __tablename__ = "tags_shared"


# --- Field projections (persisted names) ---

API_FIELDS: tuple[str, ...] = (
    "_id", "dId", "lId", "userId", "tag", "deleted", "encKey", "encConfig",
    "createTs", "updateTs", "deleteTs", "schemaVersion",
)
SYNC_FIELDS: tuple[str, ...] = API_FIELDS + ("archived", "recycled")
BACKUP_FIELDS = SYNC_FIELDS


class FieldChanges(BaseModel):
    """The mutable payload of a tag. Unset fields are left untouched."""

    model_config = ConfigDict(populate_by_name=True)

    text: str | None = PydanticField(default=None, alias="tag")
    enc_key: str | None = PydanticField(default=None, alias="encKey")
    enc_config: str | None = PydanticField(default=None, alias="encConfig")
    schema_version: int | None = PydanticField(default=None, alias="schemaVersion")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Pydantic schemas (wire names are the persisted names) ---

class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TagCreate(_WireModel):
    id: str | None = PydanticField(default=None, alias="_id")
    device_id: str = PydanticField(alias="dId")
    local_id: str = PydanticField(alias="lId")
    text: str = PydanticField(alias="tag")
    enc_key: str = PydanticField(default="", alias="encKey")
    enc_config: str = PydanticField(default="", alias="encConfig")
    create_ts: int = PydanticField(alias="createTs")
    schema_version: int = PydanticField(default=1, alias="schemaVersion")


class TagImport(_WireModel):
    """One backup record. Strict, so a mistyped value fails instead of coercing."""

    model_config = ConfigDict(populate_by_name=True, strict=True)

    id: str | None = PydanticField(default=None, alias="_id")
    device_id: str = PydanticField(alias="dId")
    local_id: str = PydanticField(alias="lId")
    user_id: str = PydanticField(alias="userId")
    text: str = PydanticField(default="", alias="tag")
    enc_key: str = PydanticField(default="", alias="encKey")
    enc_config: str = PydanticField(default="", alias="encConfig")
    deleted: bool = False
    archived: bool = False
    recycled: bool = False
    create_ts: int | None = PydanticField(default=None, alias="createTs")
    delete_ts: int | None = PydanticField(default=None, alias="deleteTs")
    schema_version: int = PydanticField(default=1, alias="schemaVersion")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class TagDetailsUpdate(_WireModel):
    text: str = PydanticField(alias="tag")
    enc_key: str = PydanticField(default="", alias="encKey")
    enc_config: str = PydanticField(default="", alias="encConfig")
    update_ts: int = PydanticField(alias="updateTs")
    schema_version: int = PydanticField(default=1, alias="schemaVersion")


class TagSoftDelete(_WireModel):
    delete_ts: int = PydanticField(alias="deleteTs")


class TagShareRequest(_WireModel):
    recipient_user_id: str = PydanticField(alias="recipientUserId")
    device_id: str = PydanticField(alias="dId")
    local_id: str = PydanticField(alias="lId")
    create_ts: int = PydanticField(alias="createTs")


class TagIdsRequest(BaseModel):
    ids: list[str]


class TagRead(_WireModel):
    id: str = PydanticField(alias="_id")
    device_id: str = PydanticField(alias="dId")
    local_id: str = PydanticField(alias="lId")
    user_id: str = PydanticField(alias="userId")
    text: str = PydanticField(alias="tag")
    deleted: bool
    enc_key: str = PydanticField(alias="encKey")
    enc_config: str = PydanticField(alias="encConfig")
    create_ts: int | None = PydanticField(alias="createTs")
    update_ts: int | None = PydanticField(alias="updateTs")
    delete_ts: int | None = PydanticField(alias="deleteTs")
    schema_version: int = PydanticField(alias="schemaVersion")


class TagSyncRead(TagRead):
    """Full record, including the visibility flags, for sync and backup."""
    archived: bool
    recycled: bool
