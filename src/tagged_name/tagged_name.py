"""Tagged Metric Name Value Type

This module provides a metric name carrying an ordered list of `key:value`
tags, encoded as a bracketed suffix (`metric[k1:v1,k2:v2]`), together with a
builder and an allow-list filtered builder.
"""

import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


# Error classes
class TaggedNameError(Exception):
    """Base exception for tagged name errors"""
    pass


class BlankMetricNameError(TaggedNameError, ValueError):
    """Metric name missing or blank"""
    pass


class BlankTagKeyError(TaggedNameError, ValueError):
    """Tag key missing or blank"""
    pass


class BlankEncodedTagError(TaggedNameError, ValueError):
    """Encoded tag missing or blank"""
    pass


class MissingAllowedTagsError(TaggedNameError, TypeError):
    """Selective builder created without an allow-list"""
    pass


def _require_non_blank(s: Optional[str], error: type, field: str) -> None:
    if s is None or not s.strip():
        raise error(f"{field} must be defined")


class TaggedName:
    """An immutable metric name with ordered, encoded tags

    Examples:
    - `requests`
    - `requests[env:prod]`
    - `jvm.gc-time[host:a1,region:us-east]`
    """

    # Name is limited to ASCII word characters, dots and hyphens; the body
    # is greedy so it runs up to the last closing bracket.
    _PATTERN = re.compile(r"([\w.-]+)\[(.+)\]", re.ASCII | re.DOTALL)

    __slots__ = ("_metric_name", "_encoded_tags")

    def __init__(self, metric_name: str, encoded_tags: Iterable[str] = ()):
        _require_non_blank(metric_name, BlankMetricNameError, "metricName")
        if isinstance(encoded_tags, str):
            raise TypeError("encodedTags must be a sequence of tags, not a string")
        tags = tuple(encoded_tags)
        for tag in tags:
            _require_non_blank(tag, BlankEncodedTagError, "encodedTag")
        self._metric_name = metric_name
        self._encoded_tags: Tuple[str, ...] = tags

    @property
    def metric_name(self) -> str:
        return self._metric_name

    @property
    def encoded_tags(self) -> Tuple[str, ...]:
        return self._encoded_tags

    @classmethod
    def decode(cls, encoded_tagged_name: str) -> 'TaggedName':
        """Create a tagged name from its encoded form

        Format: `name[key1:value1,key2:value2,...]` or a bare `name`
        Input that does not match the bracketed form is taken verbatim as the
        metric name with no tags, so decoding only fails on blank input or on
        a blank tag fragment inside the brackets.
        Trailing empty fragments (`name[a:b,]`) are discarded.
        """
        builder = TaggedNameBuilder()

        match = cls._PATTERN.search(encoded_tagged_name)
        if match:
            builder.metric_name(match.group(1))
            for fragment in cls._split_tags(match.group(2)):
                builder.add_encoded_tag(fragment)
        else:
            builder.metric_name(encoded_tagged_name)

        return builder.build()

    @staticmethod
    def _split_tags(body: str) -> List[str]:
        fragments = body.split(",")
        while fragments and fragments[-1] == "":
            fragments.pop()
        return fragments

    def encode(self) -> str:
        """Get the encoded string of this tagged name

        Tags keep their insertion order. A name without tags is encoded
        without brackets.
        """
        if self._encoded_tags:
            return f"{self._metric_name}[{','.join(self._encoded_tags)}]"
        return self._metric_name

    def has_tag(self, encoded_tag: str) -> bool:
        """Check if this name carries the given encoded tag"""
        return encoded_tag in self._encoded_tags

    def to_builder(self) -> 'TaggedNameBuilder':
        """Create a builder seeded with this name and its tags"""
        builder = TaggedNameBuilder().metric_name(self._metric_name)
        builder._encoded_tags.extend(self._encoded_tags)
        return builder

    def __str__(self) -> str:
        return self.encode()

    def __repr__(self) -> str:
        return f"TaggedName('{self.encode()}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaggedName):
            return False
        return (self._metric_name == other._metric_name
                and self._encoded_tags == other._encoded_tags)

    def __hash__(self) -> int:
        return hash((self._metric_name, self._encoded_tags))


class AllowedTagsFilter:
    """Exact key/value allow-list for tags

    Only pairs listed in the mapping pass; a key allowed with one value does
    not admit any other value for that key. An empty mapping rejects
    everything.
    """

    _ABSENT = object()

    def __init__(self, allowed_tags: Mapping[str, str]):
        if allowed_tags is None:
            raise MissingAllowedTagsError("allowedTags must not be None")
        self._allowed_tags: Dict[str, str] = dict(allowed_tags)

    @property
    def allowed_tags(self) -> Mapping[str, str]:
        return dict(self._allowed_tags)

    def allows(self, key: str, value: str) -> bool:
        """Check if the key is listed with exactly this value"""
        allowed = self._allowed_tags.get(key, self._ABSENT)
        return allowed is not self._ABSENT and allowed == value

    def allows_encoded(self, encoded_tag: str) -> bool:
        """Check if the encoded tag equals `key:value` for a listed pair"""
        return any(f"{k}:{v}" == encoded_tag for k, v in self._allowed_tags.items())

    def __repr__(self) -> str:
        return f"AllowedTagsFilter({self._allowed_tags!r})"


class TaggedNameBuilder:
    """Builder for creating tagged names fluently

    Not thread-safe. `build()` does not reset the builder: building again
    yields the same name plus any tags added in between.
    """

    def __init__(self, tag_filter: Optional[AllowedTagsFilter] = None):
        self._metric_name: Optional[str] = None
        self._encoded_tags: List[str] = []
        self._tag_filter = tag_filter

    @property
    def encoded_tags(self) -> Tuple[str, ...]:
        return tuple(self._encoded_tags)

    @property
    def tag_filter(self) -> Optional[AllowedTagsFilter]:
        return self._tag_filter

    def metric_name(self, metric_name: str) -> 'TaggedNameBuilder':
        """Set the metric name (validated at build time)"""
        self._metric_name = metric_name
        return self

    def add_tag(self, key: str, value: str) -> 'TaggedNameBuilder':
        """Add a tag from its key and value

        Raises BlankTagKeyError if key is None or blank; the value is not
        checked, so an empty value produces `key:`
        """
        _require_non_blank(key, BlankTagKeyError, "tagKey")
        if self._tag_filter is not None and not self._tag_filter.allows(key, value):
            logger.debug("Dropping tag %s:%s not in allow-list", key, value)
            return self
        self._encoded_tags.append(f"{key}:{value}")
        return self

    def add_encoded_tag(self, encoded_tag: str) -> 'TaggedNameBuilder':
        """Add an already encoded `key:value` tag as-is

        Raises BlankEncodedTagError if the tag is None or blank
        """
        _require_non_blank(encoded_tag, BlankEncodedTagError, "encodedTag")
        if self._tag_filter is not None and not self._tag_filter.allows_encoded(encoded_tag):
            logger.debug("Dropping tag %s not in allow-list", encoded_tag)
            return self
        self._encoded_tags.append(encoded_tag)
        return self

    def build(self) -> TaggedName:
        """Build the tagged name

        Raises BlankMetricNameError if no metric name was set or it is blank
        """
        return TaggedName(self._metric_name, self._encoded_tags)


class SelectiveTaggedNameBuilder(TaggedNameBuilder):
    """Builder that keeps only tags whose key and value are allowed

    Suppose tags t1 and t2 with values v1 and v2 are added, but only t1 with
    value v1 is allowed:

        metric[t1:v1]         ->      metric[t1:v1]
        metric[t1:v1,t2:v2]   ->      metric[t1:v1]
        metric[t2:v2]         ->      metric
        metric[t1:v3]         ->      metric

    Disallowed tags are dropped silently. Keys and values are expected to be
    plain strings without colons.
    """

    def __init__(self, allowed_tags: Mapping[str, str]):
        """Create a builder allowing only the given key/value pairs

        Raises MissingAllowedTagsError if allowed_tags is None; an empty
        mapping drops every tag
        """
        super().__init__(AllowedTagsFilter(allowed_tags))

    @property
    def allowed_tags(self) -> Mapping[str, str]:
        return self._tag_filter.allowed_tags
