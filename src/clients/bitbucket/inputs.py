from __future__ import annotations

from typing import Optional, Sequence, Tuple

from core.errors import ValidationError


MAX_PAGE_LIMIT = 100


def require_text(value: Optional[str], *, name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{name} must be non-empty")
    return text


def optional_text(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None


def normalize_limit(limit: int, *, default: int, maximum: int = MAX_PAGE_LIMIT) -> int:
    n = default if limit is None else int(limit)
    if n < 1 or n > maximum:
        raise ValidationError(f"limit must be between 1 and {maximum}")
    return n


def normalize_offset(offset: int) -> int:
    n = 0 if offset is None else int(offset)
    if n < 0:
        raise ValidationError("offset must be zero or positive")
    return n


def check_page_alignment(offset: int, limit: int) -> None:
    # Bitbucket pages start at multiples of the page size.
    if offset % limit != 0:
        raise ValidationError(
            f"offset ({offset}) must be divisible by limit ({limit}) for pagination. "
            f"Try offset values like 0, {limit}, {limit * 2}, etc."
        )


def normalize_read_range(read_range: Optional[Sequence[int]]) -> Optional[Tuple[int, int]]:
    if read_range is None:
        return None
    if len(read_range) != 2:
        raise ValidationError("read_range must be [startLine, endLine]")
    try:
        return int(read_range[0]), int(read_range[1])
    except (TypeError, ValueError) as e:
        raise ValidationError("read_range values must be integers") from e
