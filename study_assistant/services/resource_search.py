"""Search and ordering over a user's resource list.

Both functions take a snapshot and return a new list; the input is never
modified.
"""

from datetime import datetime, timezone
from typing import List, Sequence

from study_assistant.models.resources import Resource

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(resource: Resource) -> datetime:
    uploaded_at = resource.uploaded_at
    if uploaded_at is None:
        return _EPOCH
    if uploaded_at.tzinfo is None:
        return uploaded_at.replace(tzinfo=timezone.utc)
    return uploaded_at


def sort_newest_first(resources: Sequence[Resource]) -> List[Resource]:
    """Order by upload time, newest first; undated resources go last."""
    return sorted(resources, key=_sort_key, reverse=True)


def matches(resource: Resource, query: str) -> bool:
    """Case-insensitive substring match on title, subject or any topic."""
    needle = query.strip().lower()
    if needle in resource.title.lower():
        return True
    if needle in resource.subject.value.lower():
        return True
    return any(needle in topic.lower() for topic in resource.topics)


def filter_resources(resources: Sequence[Resource], query: str | None) -> List[Resource]:
    """Return the resources matching ``query``; all of them when it is blank."""
    if not query or not query.strip():
        return list(resources)
    return [resource for resource in resources if matches(resource, query)]
