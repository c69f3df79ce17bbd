from typing import List

from aipcheck.needle import L
from aipcheck.spec import FieldBehavior, Finding, Schema, Severity
from ..base import BaseRule
from .resources import REVISION_FIELDS, revisioned_messages


class FieldsOutputOnlyRule(BaseRule):
    id = "REVISION-FIELDS-OUTPUT-ONLY"
    group = "revisions"
    severity = Severity.WARNING
    summary = "revision_id and revision_create_time should be OUTPUT_ONLY."

    def check(self, schema: Schema) -> List[Finding]:
        findings: List[Finding] = []
        for message in revisioned_messages(schema):
            for name in REVISION_FIELDS:
                field = message.field(name)
                if field is None or field.has_behavior(FieldBehavior.OUTPUT_ONLY):
                    continue
                findings.append(
                    self.finding(
                        field.location,
                        f"{message.full_name}.{field.name}",
                        L.rule.revisions.output_only.missing,
                        message=message.name,
                        field=field.name,
                    )
                )
        return findings
