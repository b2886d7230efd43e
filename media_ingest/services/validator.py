from typing import Sequence

from ..schemas.media import MediaFile, ValidationResult


def type_matches(content_type: str, pattern: str) -> bool:
    """Exact MIME match, or category match for "<category>/*" patterns."""
    if pattern.endswith("/*"):
        category = pattern[: -len("*")]
        return content_type.startswith(category)
    return content_type == pattern


def validate(file: MediaFile, accepted_types: Sequence[str], max_size_mb: float) -> ValidationResult:
    """
    Check size and declared MIME type of a file before any I/O.

    The payload itself is never read; only the declared size and type count.
    """
    max_size_bytes = max_size_mb * 1024 * 1024
    if file.size > max_size_bytes:
        return ValidationResult(
            valid=False,
            reason=f"File size exceeds maximum allowed size of {max_size_mb:g}MB",
        )

    if accepted_types and not any(type_matches(file.content_type, p) for p in accepted_types):
        return ValidationResult(
            valid=False,
            reason=f"File type not supported. Allowed types: {', '.join(accepted_types)}",
        )

    return ValidationResult(valid=True)
