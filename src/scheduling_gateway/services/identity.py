from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..domain import (
    Ambiguous,
    InternalIdUsed,
    MissingCalendarReference,
    MissingParam,
    NotFound,
    ResolvedResource,
    ResourceIdentity,
)
from .context import ServiceContext

logger = logging.getLogger(__name__)

MAX_EDIT_DISTANCE = 1
_WHITESPACE = re.compile(r"\s+")


def normalize_name(value: Optional[str]) -> str:
    """Case-fold, strip diacritics and replacement characters, collapse whitespace."""

    text = str(value or "").replace("\ufffd", "").casefold()
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return _WHITESPACE.sub(" ", stripped).strip()


def edit_distance(left: str, right: str) -> int:
    if not left:
        return len(right)
    if not right:
        return len(left)
    row = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        previous, row[0] = row[0], i
        for j, right_char in enumerate(right, start=1):
            current = row[j]
            if left_char == right_char:
                row[j] = previous
            else:
                row[j] = min(previous + 1, row[j] + 1, row[j - 1] + 1)
            previous = current
    return row[-1]


def loose_match(query: str, candidate: str) -> bool:
    """Exact, then substring in either direction, then edit distance."""

    if not query or not candidate:
        return False
    if query == candidate:
        return True
    if query in candidate or candidate in query:
        return True
    return edit_distance(query, candidate) <= MAX_EDIT_DISTANCE


@dataclass(frozen=True, slots=True)
class CalendarTarget:
    calendar_id: str
    resource: Optional[ResourceIdentity] = None

    @property
    def label(self) -> str:
        return self.resource.display_name if self.resource else self.calendar_id

    @property
    def resource_id(self) -> Optional[str]:
        return self.resource.id if self.resource else None


@dataclass(slots=True)
class IdentityResolver:
    context: ServiceContext

    def resolve(self, name: Optional[str]) -> ResolvedResource:
        resource = self.lookup(name)
        return ResolvedResource(resource_id=resource.id, display_name=resource.display_name)

    def lookup(self, name: Optional[str]) -> ResourceIdentity:
        if not name or not str(name).strip():
            raise MissingParam("name")

        query = normalize_name(name)
        matches: List[ResourceIdentity] = []
        internal_id: Optional[str] = None

        for resource_id, resource in self.context.resource_catalog().items():
            if loose_match(query, normalize_name(resource.display_name)):
                matches.append(resource)
                continue
            if any(loose_match(query, normalize_name(alias)) for alias in resource.aliases):
                matches.append(resource)
                continue
            if query == normalize_name(resource_id):
                internal_id = resource_id

        if not matches:
            if internal_id is not None:
                raise InternalIdUsed(name, internal_id)
            raise NotFound(name)
        if len(matches) > 1:
            options = [{"resource_id": item.id, "display_name": item.display_name} for item in matches]
            logger.info("Resource name %r is ambiguous: %s", name, [item.id for item in matches])
            raise Ambiguous(name, options)
        return matches[0]

    def by_calendar(self, calendar_id: str) -> Optional[ResourceIdentity]:
        for resource in self.context.resource_catalog().values():
            if resource.calendar_id == calendar_id:
                return resource
        return None

    def target(self, *, calendar_id: Optional[str] = None, resource: Optional[str] = None) -> CalendarTarget:
        """Resolve an explicit calendar reference or a resource name to a calendar."""

        if calendar_id:
            return CalendarTarget(calendar_id=calendar_id, resource=self.by_calendar(calendar_id))
        if resource:
            identity = self.lookup(resource)
            if not identity.calendar_id:
                raise MissingCalendarReference(f"Resource {identity.id} has no calendar reference")
            return CalendarTarget(calendar_id=identity.calendar_id, resource=identity)
        raise MissingCalendarReference()

    def listing(self) -> List[Dict[str, object]]:
        return [
            {"resource_id": item.id, "display_name": item.display_name, "aliases": list(item.aliases)}
            for item in self.context.resource_catalog().values()
        ]
