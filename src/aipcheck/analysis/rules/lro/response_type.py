from typing import List

from aipcheck.needle import L
from aipcheck.spec import Finding, Schema, Severity
from ..base import BaseRule


class ResponseTypeRule(BaseRule):
    id = "LRO-RESPONSE-TYPE"
    group = "lro"
    severity = Severity.ERROR
    summary = (
        "Methods returning google.longrunning.Operation must declare "
        "operation_info with response_type and metadata_type."
    )

    def check(self, schema: Schema) -> List[Finding]:
        findings: List[Finding] = []
        for method in schema.methods:
            if not method.returns_operation:
                continue

            info = method.operation_info
            if info is None:
                findings.append(
                    self.finding(
                        method.location,
                        method.full_name,
                        L.rule.lro.response_type.missing,
                        method=method.name,
                    )
                )
                continue

            empty = [
                key
                for key, value in (
                    ("response_type", info.response_type),
                    ("metadata_type", info.metadata_type),
                )
                if not value.strip()
            ]
            if empty:
                findings.append(
                    self.finding(
                        method.location,
                        method.full_name,
                        L.rule.lro.response_type.empty,
                        method=method.name,
                        keys=" and ".join(empty),
                    )
                )
        return findings
