"""
SQLAlchemy implementation of the Base Repository.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.domain.repositories.base import BaseRepository
from app.infrastructure.database import Base, store_errors

ModelType = TypeVar("ModelType", bound=Base)

_UPSERT_DIALECTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _as_dict(obj_in: Any) -> Dict[str, Any]:
    if hasattr(obj_in, "model_dump"):
        return obj_in.model_dump(exclude_unset=True)
    return dict(obj_in)


def insert_or_ignore(db: Session, model: Type[ModelType], values: Dict[str, Any]) -> Optional[ModelType]:
    """Insert a row unless it collides with a unique key.

    Returns the new row, or None when a conflicting row already existed.
    Runs inside the session's transaction; the caller commits.
    """
    pk = list(model.__table__.primary_key.columns)[0]
    insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)

    with store_errors(db, f"insert_or_ignore:{model.__tablename__}"):
        if insert is not None:
            stmt = insert(model).values(**values).on_conflict_do_nothing().returning(pk)
            inserted = db.execute(stmt).scalar_one_or_none()
        else:
            row = model(**values)
            try:
                with db.begin_nested():
                    db.add(row)
                inserted = getattr(row, pk.key)
            except IntegrityError:
                inserted = None

        if inserted is None:
            return None
        return db.get(model, inserted)


class SQLAlchemyRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Generic repository implementation for SQLAlchemy models."""

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, id: int) -> Optional[ModelType]:
        with store_errors(self.db, f"get:{self.model.__tablename__}"):
            return self.db.get(self.model, id)

    def update(self, db_obj: ModelType, obj_in: Any) -> Optional[ModelType]:
        """Apply known fields and commit. Returns None when no field applied."""
        update_data = _as_dict(obj_in)
        applied = [field for field in update_data if hasattr(db_obj, field)]
        if not applied:
            return None

        for field in applied:
            setattr(db_obj, field, update_data[field])

        with store_errors(self.db, f"update:{self.model.__tablename__}"):
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
        return db_obj

    def commit(self) -> None:
        with store_errors(self.db, "commit"):
            self.db.commit()
