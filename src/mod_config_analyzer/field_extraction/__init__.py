"""Field extraction exports."""

from .field_extractor import (
    ROOT_FIELD_PATH,
    SETTING_NAME_PLACEHOLDER,
    canonical_value,
    extract_fields,
)
from .field_models import FieldKind, ObservedField

__all__ = [
    "FieldKind",
    "ObservedField",
    "ROOT_FIELD_PATH",
    "SETTING_NAME_PLACEHOLDER",
    "canonical_value",
    "extract_fields",
]
