from .models import (
    EnumDef,
    EnumValue,
    Field,
    FieldBehavior,
    HttpRule,
    LRO_OPERATION_TYPES,
    Message,
    Method,
    OperationInfo,
    Option,
    ProtoFile,
    Schema,
    Service,
    SourceLocation,
    freeze_value,
)
from .findings import Finding, Severity
from .protocols import ReportFormatterProtocol, RuleProtocol

__all__ = [
    "EnumDef",
    "EnumValue",
    "Field",
    "FieldBehavior",
    "HttpRule",
    "LRO_OPERATION_TYPES",
    "Message",
    "Method",
    "OperationInfo",
    "Option",
    "ProtoFile",
    "Schema",
    "Service",
    "SourceLocation",
    "freeze_value",
    # Findings
    "Finding",
    "Severity",
    # Protocols
    "RuleProtocol",
    "ReportFormatterProtocol",
]
