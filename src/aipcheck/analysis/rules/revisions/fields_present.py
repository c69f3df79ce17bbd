from typing import List

from aipcheck.needle import L
from aipcheck.spec import Finding, Message, Schema, Severity
from ..base import BaseRule
from .resources import (
    REVISION_CREATE_TIME_FIELD,
    REVISION_ID_FIELD,
    TIMESTAMP_TYPES,
    revisioned_messages,
)


class FieldsPresentRule(BaseRule):
    id = "REVISION-FIELDS-PRESENT"
    group = "revisions"
    severity = Severity.ERROR
    summary = (
        "Revisioned resources must have a string revision_id and a "
        "google.protobuf.Timestamp revision_create_time."
    )

    def check(self, schema: Schema) -> List[Finding]:
        findings: List[Finding] = []
        for message in revisioned_messages(schema):
            problems = self._problems(message)
            if problems:
                findings.append(
                    self.finding(
                        message.location,
                        message.full_name,
                        L.rule.revisions.fields_present.invalid,
                        message=message.name,
                        problems="; ".join(problems),
                    )
                )
        return findings

    def _problems(self, message: Message) -> List[str]:
        problems: List[str] = []

        revision_id = message.field(REVISION_ID_FIELD)
        if revision_id is None:
            problems.append(f"missing '{REVISION_ID_FIELD}'")
        elif revision_id.type != "string" or revision_id.label == "repeated":
            problems.append(
                f"'{REVISION_ID_FIELD}' must be a string, not '{revision_id.type}'"
            )

        create_time = message.field(REVISION_CREATE_TIME_FIELD)
        if create_time is None:
            problems.append(f"missing '{REVISION_CREATE_TIME_FIELD}'")
        elif create_time.type not in TIMESTAMP_TYPES or create_time.label == "repeated":
            problems.append(
                f"'{REVISION_CREATE_TIME_FIELD}' must be a google.protobuf.Timestamp, "
                f"not '{create_time.type}'"
            )

        return problems
