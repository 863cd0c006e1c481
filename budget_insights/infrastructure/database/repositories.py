"""Record store - generic query/create/update access over the ORM collections"""

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from budget_insights.domain.exceptions import StoreUnavailableError
from budget_insights.infrastructure.database.models import COLLECTIONS

Filters = Mapping[str, Any]
Sort = Sequence[Tuple[str, str]]

_RANGE_OPERATORS = {
    "gte": lambda column, value: column >= value,
    "lte": lambda column, value: column <= value,
    "gt": lambda column, value: column > value,
    "lt": lambda column, value: column < value,
}


def _to_record(row: Any) -> Dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


class RecordStore:
    """
    Collection-oriented access used by the engine.

    Filters are conjunctions: `{"field": value}` for equality or
    `{"field": {"gte": a, "lte": b}}` for ranges. Every SQLAlchemy error is
    re-raised as StoreUnavailableError so callers can degrade per read.
    """

    def __init__(self, db: Session):
        self.db = db

    def _model(self, collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise StoreUnavailableError(f"Unknown collection '{collection}'") from None

    def query(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        sort: Optional[Sort] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Fetch records matching every predicate in `filters`"""
        model = self._model(collection)
        try:
            query = self.db.query(model)
            for field, condition in (filters or {}).items():
                column = getattr(model, field)
                if isinstance(condition, Mapping):
                    for op, value in condition.items():
                        query = query.filter(_RANGE_OPERATORS[op](column, value))
                else:
                    query = query.filter(column == condition)

            for field, direction in sort or ():
                column = getattr(model, field)
                query = query.order_by(column.desc() if direction == "desc" else column.asc())

            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)

            return [_to_record(row) for row in query.all()]
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"Query on {collection} failed: {e}") from e

    def create(self, collection: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a record and return it with its generated id"""
        model = self._model(collection)
        try:
            row = model(**fields)
            self.db.add(row)
            self.db.flush()  # Get ID without committing
            return _to_record(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"Create on {collection} failed: {e}") from e

    def update_by_id(self, collection: str, record_id: str, fields: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply `fields` to one record; None when the id does not exist"""
        model = self._model(collection)
        try:
            row = self.db.get(model, record_id)
            if row is None:
                return None
            for field, value in fields.items():
                setattr(row, field, value)
            self.db.flush()
            return _to_record(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"Update on {collection} failed: {e}") from e

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"Commit failed: {e}") from e


def as_date(value: Any) -> Optional[date]:
    """Normalize a stored date/datetime/ISO string to a date"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
