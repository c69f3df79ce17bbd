from .response_type import ResponseTypeRule
from .not_streaming import NotStreamingRule
from .operation_info import OperationInfoMisplacedRule, OperationTypesResolveRule

__all__ = [
    "ResponseTypeRule",
    "NotStreamingRule",
    "OperationInfoMisplacedRule",
    "OperationTypesResolveRule",
]
