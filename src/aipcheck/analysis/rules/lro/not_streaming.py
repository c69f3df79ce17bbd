from typing import List

from aipcheck.needle import L
from aipcheck.spec import Finding, Schema, Severity
from ..base import BaseRule


class NotStreamingRule(BaseRule):
    id = "LRO-NOT-STREAMING"
    group = "lro"
    severity = Severity.ERROR
    summary = "Long-running methods must not stream their response."

    def check(self, schema: Schema) -> List[Finding]:
        return [
            self.finding(
                method.location,
                method.full_name,
                L.rule.lro.not_streaming.streaming,
                method=method.name,
            )
            for method in schema.methods
            if method.is_long_running and method.server_streaming
        ]
