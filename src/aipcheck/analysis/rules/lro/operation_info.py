from typing import List

from aipcheck.needle import L
from aipcheck.spec import Finding, Method, Schema, Severity
from ..base import BaseRule

TRUSTED_PREFIXES = ("google.protobuf.", ".google.protobuf.")


class OperationInfoMisplacedRule(BaseRule):
    id = "LRO-OPERATION-INFO-MISPLACED"
    group = "lro"
    severity = Severity.WARNING
    summary = "operation_info only has an effect on methods returning an Operation."

    def check(self, schema: Schema) -> List[Finding]:
        return [
            self.finding(
                method.location,
                method.full_name,
                L.rule.lro.operation_info.misplaced,
                method=method.name,
                response=method.response_type,
            )
            for method in schema.methods
            if method.operation_info is not None and not method.returns_operation
        ]


class OperationTypesResolveRule(BaseRule):
    """
    Unqualified operation_info type names must name a message in the loaded
    files. Dotted names may live in files that were not loaded and are
    trusted, as are the protobuf well-known types.
    """

    id = "LRO-TYPES-RESOLVE"
    group = "lro"
    severity = Severity.WARNING
    summary = "operation_info response_type and metadata_type should resolve."

    def check(self, schema: Schema) -> List[Finding]:
        findings: List[Finding] = []
        for method in schema.methods:
            info = method.operation_info
            if info is None:
                continue
            for key, type_name in (
                ("response_type", info.response_type.strip()),
                ("metadata_type", info.metadata_type.strip()),
            ):
                if self._resolves(schema, method, type_name):
                    continue
                findings.append(
                    self.finding(
                        method.location,
                        method.full_name,
                        L.rule.lro.operation_info.unresolved,
                        method=method.name,
                        key=key,
                        type=type_name,
                    )
                )
        return findings

    def _resolves(self, schema: Schema, method: Method, type_name: str) -> bool:
        if not type_name or type_name.startswith(TRUSTED_PREFIXES):
            return True
        if schema.find_message(type_name, method.package) is not None:
            return True
        return "." in type_name.lstrip(".")
