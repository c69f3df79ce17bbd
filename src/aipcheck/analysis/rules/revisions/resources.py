import re
from typing import Dict, List, Optional, Tuple

from aipcheck.spec import Message, Method, Schema

REVISION_ID_FIELD = "revision_id"
REVISION_CREATE_TIME_FIELD = "revision_create_time"
REVISION_FIELDS = (REVISION_ID_FIELD, REVISION_CREATE_TIME_FIELD)

TIMESTAMP_TYPES = ("google.protobuf.Timestamp", ".google.protobuf.Timestamp")

# Standard revision methods; the group names the revisioned resource.
REVISION_METHOD_PATTERNS = (
    re.compile(r"^List(?P<resource>\w+)Revisions$"),
    re.compile(r"^Delete(?P<resource>\w+)Revision$"),
    re.compile(r"^Tag(?P<resource>\w+)Revision$"),
    re.compile(r"^Commit(?P<resource>\w+)$"),
    re.compile(r"^Rollback(?P<resource>\w+)$"),
)

DELETE_REVISION_PATTERN = REVISION_METHOD_PATTERNS[1]


def revision_resource_name(method: Method) -> Optional[str]:
    for pattern in REVISION_METHOD_PATTERNS:
        match = pattern.match(method.name)
        if match:
            return match.group("resource")
    return None


def has_revision_fields(message: Message) -> bool:
    return any(message.field(name) is not None for name in REVISION_FIELDS)


def revision_methods(schema: Schema) -> List[Tuple[Method, str]]:
    return [
        (method, resource)
        for method in schema.methods
        for resource in (revision_resource_name(method),)
        if resource is not None
    ]


def revisioned_messages(schema: Schema) -> List[Message]:
    """
    Messages that carry revision history: those declaring a revision field
    and those named by a standard revision method. Ordered by full name.
    """
    found: Dict[str, Message] = {}
    for message in schema.messages:
        if has_revision_fields(message):
            found.setdefault(message.full_name, message)

    for method, resource in revision_methods(schema):
        message = schema.find_message(resource, method.package)
        if message is not None:
            found.setdefault(message.full_name, message)

    return [found[name] for name in sorted(found)]
