from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..db import SessionLocal
from ..errors import MetadataError
from ..models.models import MediaLibraryEntry
from .store import CatalogStore


class SqlCatalogStore(CatalogStore):
    """Catalog rows in the service's own database via SQLAlchemy."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory or SessionLocal

    def insert_row(self, table: str, row: Dict[str, Any]) -> None:
        if table != MediaLibraryEntry.__tablename__:
            raise MetadataError(table, "unknown catalog table")
        db = self._session_factory()
        try:
            db.add(MediaLibraryEntry(**row))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise MetadataError(table, str(e), e) from e
        finally:
            db.close()
