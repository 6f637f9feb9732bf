"""
Request, response and cache directive models for the Response Cache service.
"""

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .store.base import KeyValueStore


class SessionMode(IntEnum):
    """Visibility scope a cache entry was written under.

    The integer values end up inside the hashed cache key, so they must
    never be renumbered.
    """
    NO_SESSION = 0
    PRIVATE = 1
    AUTHENTICATED_PUBLIC = 2


class CacheScope(str, Enum):
    """Scope of a computed response."""
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class OperationType(str, Enum):
    """Operation kinds; only queries are read from or written to the cache."""
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"


@dataclass(frozen=True)
class CachePolicy:
    """Cache directive authored by the computation."""
    scope: CacheScope = CacheScope.PUBLIC
    max_age: int = 0


class QueryRequest(BaseModel):
    """Incoming query document plus its inputs."""
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(..., description="Query document text")
    operation_name: Optional[str] = Field(None, alias="operationName")
    variables: Dict[str, Any] = Field(default_factory=dict)
    extensions: Dict[str, Any] = Field(default_factory=dict)


class QueryResponse(BaseModel):
    """Response body sent back to the caller."""
    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[Dict[str, Any]]] = None
    extensions: Optional[Dict[str, Any]] = None


@dataclass
class ExecutionResult:
    """What the cached computation hands back to the pipeline."""
    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[Dict[str, Any]]] = None
    cache_policy: Optional[CachePolicy] = None


_NAME_RE = re.compile(r"[_A-Za-z][_0-9A-Za-z]*")
_DEFINITION_RE = re.compile(
    r"(query|mutation|subscription|fragment)(?![_0-9A-Za-z])\s*([_A-Za-z][_0-9A-Za-z]*)?"
)
# Strings and comments are blanked out in one pass so a quote inside a
# comment, or a hash inside a string, cannot hide the other.
_SKIPPED_RE = re.compile(r'"""(?:\\"""|[^"]|"(?!""))*"""|"(?:\\.|[^"\\\n\r])*"|#[^\n\r]*')
_IGNORED_RE = re.compile(r"[\ufeff,]")


def _top_level_definitions(document_text: str) -> List[Tuple[str, Optional[str]]]:
    """(keyword, name) for every top-level definition; shorthand ``{`` is a query."""
    text = _IGNORED_RE.sub(" ", _SKIPPED_RE.sub(" ", document_text))
    definitions: List[Tuple[str, Optional[str]]] = []
    depth = 0
    awaiting_body = False
    pos = 0

    while pos < len(text):
        char = text[pos]
        if char in "{([":
            if depth == 0 and char == "{":
                if not awaiting_body:
                    definitions.append((OperationType.QUERY.value, None))
                awaiting_body = False
            depth += 1
        elif char in "})]":
            depth = max(depth - 1, 0)
        elif depth == 0 and _NAME_RE.match(text, pos):
            match = _DEFINITION_RE.match(text, pos)
            if match and not awaiting_body:
                definitions.append((match.group(1), match.group(2)))
                awaiting_body = True
                pos = match.end()
            else:
                pos = _NAME_RE.match(text, pos).end()
            continue
        pos += 1

    return definitions


def detect_operation_type(document_text: str, operation_name: Optional[str] = None) -> OperationType:
    """Classify the operation a document will run.

    Fragment definitions are ignored and anonymous shorthand documents
    (starting with ``{``) are queries. When an operation name is given, the
    definition carrying that name decides. Otherwise any mutation or
    subscription in the document classifies it, so an ambiguous document is
    never treated as cacheable.
    """
    operations = [
        (keyword, name)
        for keyword, name in _top_level_definitions(document_text)
        if keyword != "fragment"
    ]

    if operation_name:
        for keyword, name in operations:
            if name == operation_name:
                return OperationType(keyword)

    for keyword, _ in operations:
        if keyword != OperationType.QUERY.value:
            return OperationType(keyword)
    return OperationType.QUERY


@dataclass
class RequestContext:
    """Everything the cache engine may look at for one request."""
    request: QueryRequest
    operation_type: OperationType = OperationType.QUERY
    headers: Mapping[str, str] = field(default_factory=dict)
    response: Optional[QueryResponse] = None
    overall_cache_policy: Optional[CachePolicy] = None
    store: Optional["KeyValueStore"] = None
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def document_text(self) -> str:
        return self.request.query

    @property
    def operation_name(self) -> Optional[str]:
        return self.request.operation_name

    @property
    def is_query(self) -> bool:
        return self.operation_type is OperationType.QUERY

    @classmethod
    def from_request(
        cls,
        request: QueryRequest,
        headers: Optional[Mapping[str, str]] = None,
        store: Optional["KeyValueStore"] = None,
    ) -> "RequestContext":
        """Build a context, classifying the operation from its document."""
        return cls(
            request=request,
            operation_type=detect_operation_type(request.query, request.operation_name),
            headers=headers or {},
            store=store,
        )
