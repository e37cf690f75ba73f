from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Group:
    """Study group; ``curator_id`` is the teacher responsible for it, if any."""

    group_id: int
    name: str
    curator_id: Optional[int] = None
