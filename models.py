import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TranscriptResult:
    """Transcript text and view count of one video."""
    transcript: str
    views: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TranscriptSegment:
    """One timed caption line from a timed-text track."""
    text: str
    offset: float
    duration: float
    lang: Optional[str] = None


def join_segments(texts: List[str]) -> str:
    """Join segment texts with single spaces, dropping empty ones."""
    return " ".join(t for t in texts if t)


def parse_view_count(text: Optional[str]) -> int:
    """'1,234,567 views' -> 1234567; empty or digit-less text -> 0."""
    digits = re.sub(r"[^0-9]", "", text or "")
    return int(digits) if digits else 0
