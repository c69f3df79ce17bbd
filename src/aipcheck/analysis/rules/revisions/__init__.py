from .fields_present import FieldsPresentRule
from .output_only import FieldsOutputOnlyRule
from .delete_requires_id import DeleteRequiresIdRule
from .resources import revisioned_messages, revision_resource_name

__all__ = [
    "FieldsPresentRule",
    "FieldsOutputOnlyRule",
    "DeleteRequiresIdRule",
    "revisioned_messages",
    "revision_resource_name",
]
