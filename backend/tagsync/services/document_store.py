"""Document-store access over a SQLModel table.

Records are exchanged as plain dicts keyed by their persisted column names.
Filters use a small predicate language:

    {"userId": "u1"}                         equality
    {"updateTs": None}                       IS NULL
    {"_id": {"$in": ["a", "b"]}}             set membership
    {"updateTs": {"$lt": 10}}                comparison
    {"$or": [{...}, {...}]}                  disjunction of sub-filters

Top-level keys are ANDed. ``update_one`` and ``delete_one`` compile to a
single ``UPDATE``/``DELETE`` statement, so a filter evaluated by them is
checked and applied atomically by the database.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, delete, func, inspect, or_, true, update
from sqlmodel import Session, SQLModel, select

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class UnknownFieldError(KeyError):
    """A filter, projection or field set named a column the table does not have."""


@dataclass(frozen=True)
class UpdateResult:
    acknowledged: bool
    matched_count: int
    modified_count: int


@dataclass(frozen=True)
class DeleteResult:
    deleted_count: int


class DocumentCollection:
    """One table seen as a collection of documents."""

    def __init__(self, session: Session, model: type[SQLModel]) -> None:
        self._session = session
        self._model = model
        mapper = inspect(model)
        # persisted column name -> ORM attribute name
        self._attrs: dict[str, str] = {
            col.name: key for key, col in mapper.columns.items()
        }
        self._pk = mapper.primary_key[0]
        self._required = {
            name for name, info in model.model_fields.items() if info.is_required()
        }

    @property
    def name(self) -> str:
        return self._model.__tablename__

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_one(self, fields: Mapping[str, Any]) -> Document | None:
        """Insert a document; ``None`` when required fields are missing."""
        values = {self._attr(name): value for name, value in fields.items() if value is not None}
        missing = self._required - values.keys()
        if missing:
            logger.debug("insert into %s missing fields %s", self.name, sorted(missing))
            return None

        record = self._model(**values)
        self._session.add(record)
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        self._session.refresh(record)
        return self._to_document(record)

    def update_one(self, filter: Mapping[str, Any], field_set: Mapping[str, Any]) -> UpdateResult:
        """Set ``field_set`` on the first document matching ``filter``.

        Only documents where at least one field would actually change count
        as modified, matching document-store ``modifiedCount`` semantics.
        """
        values = {
            getattr(self._model, self._attr(name)): value for name, value in field_set.items()
        }
        condition = self._compile(filter)
        changes = or_(*[column.is_distinct_from(value) for column, value in values.items()])
        target = select(self._pk).where(condition, changes).limit(1).scalar_subquery()
        stmt = (
            update(self._model)
            .where(self._pk == target)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self._session.execute(stmt)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        modified = result.rowcount
        matched = modified if modified else self.count(filter)
        return UpdateResult(acknowledged=True, matched_count=matched, modified_count=modified)

    def delete_one(self, filter: Mapping[str, Any]) -> DeleteResult:
        target = select(self._pk).where(self._compile(filter)).limit(1).scalar_subquery()
        return self._delete(delete(self._model).where(self._pk == target))

    def delete_many(self, filter: Mapping[str, Any]) -> DeleteResult:
        return self._delete(delete(self._model).where(self._compile(filter)))

    def _delete(self, stmt) -> DeleteResult:
        try:
            result = self._session.execute(stmt.execution_options(synchronize_session=False))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return DeleteResult(deleted_count=result.rowcount)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_one(
        self, filter: Mapping[str, Any], projection: Iterable[str] | None = None
    ) -> Document | None:
        record = self._session.exec(
            select(self._model).where(self._compile(filter)).limit(1)
        ).first()
        if record is None:
            return None
        return self._to_document(record, projection)

    def find(
        self, filter: Mapping[str, Any], projection: Iterable[str] | None = None
    ) -> list[Document]:
        fields = tuple(projection) if projection is not None else None
        records = self._session.exec(
            select(self._model).where(self._compile(filter)).order_by(self._pk)
        ).all()
        return [self._to_document(r, fields) for r in records]

    def count(self, filter: Mapping[str, Any]) -> int:
        return self._session.exec(
            select(func.count()).select_from(self._model).where(self._compile(filter))
        ).one()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _attr(self, name: str) -> str:
        try:
            return self._attrs[name]
        except KeyError:
            raise UnknownFieldError(f"{self.name} has no field {name!r}") from None

    def _compile(self, filter: Mapping[str, Any]):
        clauses = []
        for name, value in filter.items():
            if name == "$or":
                clauses.append(or_(*[self._compile(sub) for sub in value]))
                continue
            column = getattr(self._model, self._attr(name))
            if isinstance(value, Mapping):
                for op, operand in value.items():
                    if op == "$in":
                        clauses.append(column.in_(list(operand)))
                    elif op == "$lt":
                        clauses.append(column < operand)
                    else:
                        raise ValueError(f"Unsupported filter operator {op!r}")
            elif value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == value)
        return and_(true(), *clauses)

    def _to_document(self, record: SQLModel, projection: Iterable[str] | None = None) -> Document:
        names = projection if projection is not None else self._attrs.keys()
        return {name: getattr(record, self._attr(name)) for name in names}
