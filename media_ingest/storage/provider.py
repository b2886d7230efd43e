from typing import Optional


class StorageProvider:
    """Object store addressed by bucket + object path.

    put_object never replaces an existing object unless overwrite=True is
    passed; a refused or failed write raises StorageError.
    """

    def put_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = False,
    ) -> str:
        raise NotImplementedError

    def get_public_url(self, bucket: str, path: str) -> str:
        raise NotImplementedError

    def exists(self, bucket: str, path: str) -> bool:
        raise NotImplementedError

    def delete(self, bucket: str, path: str) -> None:
        raise NotImplementedError


def clean_path(path: str) -> str:
    """Relative, traversal-free object path ("/a/../b" -> "a/b")."""
    path = path.replace("\\", "/").replace("..", "")
    return "/".join(part for part in path.split("/") if part)
