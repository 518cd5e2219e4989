# backend/tutorhub/repositories/base_repository.py
"""
Shared data access for the booking store's repositories.

Repositories add and flush but never commit; the calling service owns
the transaction. Database errors leave this layer as
``RepositoryException`` with the driver error chained as ``__cause__``,
which is how the booking service recognises a unique-index violation.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: str) -> Optional[T]:
        try:
            model_id = self.model.id  # type: ignore[attr-defined]
            return self._build_query().filter(model_id == id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Lookup of {self.model.__name__} {id} failed: {str(e)}")
            raise RepositoryException(f"Could not load {self.model.__name__}") from e

    def create(self, **kwargs: Any) -> T:
        """Add a new row and flush it so defaults and constraints apply now."""
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as exc:
            self.logger.warning("Constraint rejected new %s: %s", self.model.__name__, exc.orig)
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc.orig}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Insert of {self.model.__name__} failed: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Could not create {self.model.__name__}") from e

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        try:
            return self._build_query().filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"{self.model.__name__} lookup by {sorted(kwargs)} failed: {e}")
            raise RepositoryException(f"Could not load {self.model.__name__}") from e

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"{self.model.__name__} query failed: {str(e)}")
            raise RepositoryException(f"Could not query {self.model.__name__}") from e
