from typing import List

from aipcheck.spec import RuleProtocol
from .base import BaseRule
from .lro import (
    NotStreamingRule,
    OperationInfoMisplacedRule,
    OperationTypesResolveRule,
    ResponseTypeRule,
)
from .revisions import DeleteRequiresIdRule, FieldsOutputOnlyRule, FieldsPresentRule


def default_rules() -> List[RuleProtocol]:
    """Fresh instances of every built-in rule."""
    return [
        ResponseTypeRule(),
        NotStreamingRule(),
        OperationInfoMisplacedRule(),
        OperationTypesResolveRule(),
        FieldsPresentRule(),
        FieldsOutputOnlyRule(),
        DeleteRequiresIdRule(),
    ]


__all__ = [
    "BaseRule",
    "default_rules",
    "ResponseTypeRule",
    "NotStreamingRule",
    "OperationInfoMisplacedRule",
    "OperationTypesResolveRule",
    "FieldsPresentRule",
    "FieldsOutputOnlyRule",
    "DeleteRequiresIdRule",
]
