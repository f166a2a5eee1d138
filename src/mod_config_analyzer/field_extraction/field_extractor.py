"""Recursive field extraction over arbitrary JSON documents."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from .field_models import FieldKind, ObservedField

ROOT_FIELD_PATH = "[root]"
NULL_VALUE = "null"

SETTINGS_CONFIG_TYPE = "default-config"
SETTINGS_PARENT_PATH = "settings"
SETTING_NAME_PLACEHOLDER = "{settingName}"

ExtractedFields = dict[str, ObservedField]


def extract_fields(document: Any, config_type_name: str) -> ExtractedFields:
    """Return every field path of one document with its kind and canonical values.

    Array elements share their parent's path, so fields of object elements are
    merged into one bucket per key and scalar elements into one array entry.
    Keys directly under ``settings`` in ``default-config`` documents collapse into
    ``settings.{settingName}``.
    """
    return _extract(document, config_type_name, path="")


def canonical_value(value: Any) -> str:
    """Render one JSON scalar the way it is compared and stored.

    Floats follow JavaScript ``String()`` except for exponent notation:
    non-integral floats use Python's ``repr`` (``1e-07`` rather than ``1e-7``),
    and integral floats always print every digit (``1000000000000000000000``
    rather than ``1e+21``).
    """
    if value is None:
        return NULL_VALUE
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _extract(node: Any, config_type_name: str, *, path: str) -> ExtractedFields:
    if node is None:
        return {_path_or_root(path): ObservedField(FieldKind.PRIMITIVE, {NULL_VALUE})}
    if isinstance(node, Mapping):
        return _extract_object(node, config_type_name, path=path)
    if _is_array(node):
        return _extract_array(node, config_type_name, path=path)
    return {_path_or_root(path): ObservedField(FieldKind.PRIMITIVE, {canonical_value(node)})}


def _extract_object(
    node: Mapping[str, Any], config_type_name: str, *, path: str
) -> ExtractedFields:
    fields: ExtractedFields = {}
    for key, value in node.items():
        child_path = _child_path(path, str(key), config_type_name)
        if value is None:
            _merge_observed(fields, child_path, ObservedField(FieldKind.PRIMITIVE, {NULL_VALUE}))
        elif isinstance(value, Mapping) or _is_array(value):
            for nested_path, observed in _extract(value, config_type_name, path=child_path).items():
                _merge_observed(fields, nested_path, observed)
        else:
            _merge_observed(
                fields, child_path, ObservedField(FieldKind.PRIMITIVE, {canonical_value(value)})
            )
    return fields


def _extract_array(
    node: Sequence[Any], config_type_name: str, *, path: str
) -> ExtractedFields:
    fields: ExtractedFields = {}
    composite_items = [item for item in node if isinstance(item, Mapping)]
    scalar_items = [item for item in node if item is None or _is_scalar(item)]

    if composite_items:
        merged: ExtractedFields = {}
        for item in composite_items:
            for item_path, observed in _extract_object(item, config_type_name, path="").items():
                _merge_observed(merged, item_path, observed)
        for item_path, observed in merged.items():
            fields[f"{path}.{item_path}" if path else item_path] = observed

    if scalar_items:
        values = {canonical_value(item) for item in scalar_items if item is not None}
        # an array holding only nulls contributes no entry
        if values:
            fields[_path_or_root(path)] = ObservedField(FieldKind.ARRAY, values)

    return fields


def _merge_observed(fields: ExtractedFields, path: str, observed: ObservedField) -> None:
    # the first kind seen for a path is kept
    target = fields.setdefault(path, ObservedField(observed.kind))
    target.values.update(observed.values)


def _child_path(parent_path: str, key: str, config_type_name: str) -> str:
    if parent_path == SETTINGS_PARENT_PATH and config_type_name == SETTINGS_CONFIG_TYPE:
        return f"{parent_path}.{SETTING_NAME_PLACEHOLDER}"
    return f"{parent_path}.{key}" if parent_path else key


def _path_or_root(path: str) -> str:
    return path or ROOT_FIELD_PATH


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str | bytes)


def _is_scalar(value: Any) -> bool:
    return not isinstance(value, Mapping) and not _is_array(value)
