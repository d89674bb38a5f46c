"""Tagged Name - Metric names with bracket-encoded tags

This package provides the tagged metric name value type, its builder, and an
allow-list filtered builder for limiting which tags reach a collector.
"""

from .tagged_name import (
    TaggedName,
    TaggedNameBuilder,
    SelectiveTaggedNameBuilder,
    AllowedTagsFilter,
    TaggedNameError,
    BlankMetricNameError,
    BlankTagKeyError,
    BlankEncodedTagError,
    MissingAllowedTagsError,
)

__version__ = "0.1.0"

__all__ = [
    "TaggedName",
    "TaggedNameBuilder",
    "SelectiveTaggedNameBuilder",
    "AllowedTagsFilter",
    "TaggedNameError",
    "BlankMetricNameError",
    "BlankTagKeyError",
    "BlankEncodedTagError",
    "MissingAllowedTagsError",
]
