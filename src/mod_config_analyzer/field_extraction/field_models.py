"""Field extraction entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FieldKind(str, Enum):
    """Shape recorded for one field path."""

    PRIMITIVE = "primitive"
    ARRAY = "array"


@dataclass
class ObservedField:
    """Kind and canonical values seen at one field path of one document."""

    kind: FieldKind
    values: set[str] = field(default_factory=set)
