"""Base repository class with common CRUD operations."""

import logging
from abc import ABC
from typing import Generic, TypeVar, Type, Optional, Any, Dict
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType], ABC):
    """Base repository class providing common CRUD operations.

    Provides:
    - Standard CRUD operations (Create, Read, Update, Delete)
    - Soft delete filtering for models with AuditMixin
    - Structured logging for data operations

    Repositories only ``flush``; committing is the service's job.
    """

    def __init__(self, db: Session, model: Type[ModelType], correlation_id: Optional[str] = None):
        """Initialize repository with database session and model type.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
            correlation_id: Optional request correlation ID for logging
        """
        self.db = db
        self.model = model
        self.correlation_id = correlation_id
        self.logger = logging.getLogger(self.__class__.__name__)

    def create(self, obj_in: Dict[str, Any], **kwargs: Any) -> ModelType:
        """Create a new record in the database.

        Args:
            obj_in: Dict with creation data
            **kwargs: Additional fields to set on the model

        Returns:
            Created model instance

        Raises:
            SQLAlchemyError: On database operation failure, including
                unique constraint violations
        """
        try:
            obj_data = dict(obj_in)
            obj_data.update(kwargs)
            db_obj = self.model(**obj_data)

            self.db.add(db_obj)
            self.db.flush()
            self.db.refresh(db_obj)

            self._log_operation("create", model=self.model.__name__, id=getattr(db_obj, 'id', None))
            return db_obj

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to create {self.model.__name__}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def get_by_id(self, id: int, include_deleted: bool = False) -> Optional[ModelType]:
        """Get a record by ID.

        Args:
            id: Record ID
            include_deleted: Whether to include soft-deleted records

        Returns:
            Model instance or None if not found
        """
        query = self.db.query(self.model).filter(self.model.id == id)

        if not include_deleted and hasattr(self.model, 'is_deleted'):
            query = query.filter(self.model.is_deleted == False)

        result = query.first()
        self._log_operation("get_by_id", model=self.model.__name__, id=id, found=result is not None)
        return result

    def update(self, db_obj: ModelType, fields: Dict[str, Any]) -> ModelType:
        """Set fields on a loaded record and flush.

        Args:
            db_obj: Instance previously loaded through this repository
            fields: Attribute values to set

        Returns:
            The refreshed instance
        """
        try:
            for field, value in fields.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            self.db.flush()
            self.db.refresh(db_obj)

            self._log_operation("update", model=self.model.__name__, id=db_obj.id, fields=list(fields.keys()))
            return db_obj

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to update {self.model.__name__} with id {db_obj.id}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def delete(self, db_obj: ModelType) -> None:
        """Hard delete a loaded record.

        Raises:
            SQLAlchemyError: On database operation failure
        """
        try:
            record_id = db_obj.id
            self.db.delete(db_obj)
            self.db.flush()
            self._log_operation("delete", model=self.model.__name__, id=record_id)

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to delete {self.model.__name__}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def _log_operation(self, operation: str, **kwargs: Any) -> None:
        """Log repository operation with structured fields.

        Args:
            operation: Name of the operation being performed
            **kwargs: Additional fields to include in log
        """
        log_data = {
            "correlation_id": self.correlation_id,
            "repository": self.__class__.__name__,
            "operation": operation,
            **kwargs
        }
        self.logger.info(f"Repository operation: {operation}", extra=log_data)
