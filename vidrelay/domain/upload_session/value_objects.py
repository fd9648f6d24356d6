"""
Upload Session Value Objects

Immutable value objects for multipart upload sessions and their parts.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from ..errors import ValidationError

# Part numbers accepted by S3-compatible multipart uploads
MIN_PART_NUMBER = 1
MAX_PART_NUMBER = 10000


class SessionState(Enum):
    """Upload session lifecycle state."""
    OPEN = "open"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    ABORTED = "aborted"

    def is_finalized(self) -> bool:
        """True once the session can no longer accept parts or completion."""
        return self is not SessionState.OPEN


@dataclass(frozen=True)
class StorageSession:
    """Session handle returned by the storage backend when a multipart upload begins."""
    upload_id: str
    key: str
    bucket: str


@dataclass(frozen=True)
class CompletedPart:
    """
    A part reported by the client after a successful part upload.

    Attributes:
        part_number: Part index (1-based)
        etag: Opaque completion tag returned by storage for the part
    """
    part_number: int
    etag: str

    def __post_init__(self):
        """Validate part values."""
        validate_part_number(self.part_number)
        if not isinstance(self.etag, str) or not self.etag.strip():
            raise ValidationError(f"Part {self.part_number} has an empty ETag")

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {"part_number": self.part_number, "etag": self.etag}

    @classmethod
    def from_dict(cls, data: dict) -> "CompletedPart":
        """Create CompletedPart from dictionary."""
        return cls(part_number=data["part_number"], etag=data["etag"])


@dataclass(frozen=True)
class PartUrl:
    """Time-limited upload URL attributed to one part number."""
    part_number: int
    url: str

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {"part_number": self.part_number, "signed_url": self.url}


def validate_part_number(part_number) -> int:
    """
    Validate a single part number.

    Raises:
        ValidationError: If part_number is not an int in the accepted range
    """
    # bool is an int subclass; True must not be accepted as part 1
    if isinstance(part_number, bool) or not isinstance(part_number, int):
        raise ValidationError(f"Part number must be an integer, got {part_number!r}")
    if not MIN_PART_NUMBER <= part_number <= MAX_PART_NUMBER:
        raise ValidationError(
            f"Part number must be between {MIN_PART_NUMBER} and {MAX_PART_NUMBER}, "
            f"got {part_number}"
        )
    return part_number


def normalize_part_numbers(part_numbers: Iterable, max_parts: int) -> List[int]:
    """
    Validate a requested set of part numbers.

    Duplicates are collapsed; the result is sorted ascending.

    Args:
        part_numbers: Part numbers requested by the caller
        max_parts: Maximum number of distinct parts per request

    Returns:
        Sorted list of distinct part numbers

    Raises:
        ValidationError: If the set is empty, too large or holds invalid numbers
    """
    if part_numbers is None:
        raise ValidationError("Part numbers are required")

    unique = sorted({validate_part_number(number) for number in part_numbers})

    if not unique:
        raise ValidationError("At least one part number is required")
    if len(unique) > max_parts:
        raise ValidationError(
            f"At most {max_parts} part numbers may be requested at once, got {len(unique)}"
        )
    return unique


def normalize_completed_parts(parts: Iterable[CompletedPart]) -> List[CompletedPart]:
    """
    Validate the part list reported for completion.

    Returns:
        Parts sorted by part number

    Raises:
        ValidationError: If the list is empty or repeats a part number
    """
    ordered = sorted(parts or [], key=lambda part: part.part_number)

    if not ordered:
        raise ValidationError("At least one completed part is required")

    seen = set()
    for part in ordered:
        if part.part_number in seen:
            raise ValidationError(f"Part {part.part_number} reported more than once")
        seen.add(part.part_number)

    return ordered
