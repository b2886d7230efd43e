from typing import Any, Dict

from supabase import Client

from ..errors import MetadataError
from .store import CatalogStore


class SupabaseCatalogStore(CatalogStore):
    """Catalog rows in a hosted Supabase table."""

    def __init__(self, client: Client):
        self._client = client

    def insert_row(self, table: str, row: Dict[str, Any]) -> None:
        try:
            self._client.table(table).insert(row).execute()
        except Exception as e:
            raise MetadataError(table, str(e), e) from e
