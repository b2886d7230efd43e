from typing import Any, Dict


class CatalogStore:
    def insert_row(self, table: str, row: Dict[str, Any]) -> None:
        raise NotImplementedError
