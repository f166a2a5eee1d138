"""Aggregate merging exports."""

from .aggregate_merger import merge_extracted_fields
from .aggregate_models import ConfigTypeAggregate, FieldAggregate

__all__ = [
    "ConfigTypeAggregate",
    "FieldAggregate",
    "merge_extracted_fields",
]
