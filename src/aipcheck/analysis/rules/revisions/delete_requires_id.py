from typing import List, Optional

from aipcheck.needle import L
from aipcheck.spec import FieldBehavior, Finding, Message, Schema, Severity
from ..base import BaseRule
from .resources import DELETE_REVISION_PATTERN

FALLBACK_WORDS = ("latest", "most recent", "default", "if omitted", "if unset")
EXPLICIT_WORDS = ("explicit", "revision id", "revision_id", "@")


class DeleteRequiresIdRule(BaseRule):
    """
    Deleting a revision must name it explicitly; it must never fall back to
    the latest revision. That contract lives in prose, so the rule checks
    what is visible (REQUIRED and a comment that asks for an explicit
    revision id without naming a fallback) and only ever warns.
    """

    id = "REVISION-DELETE-REQUIRES-ID"
    group = "revisions"
    severity = Severity.WARNING
    summary = (
        "Delete<Resource>Revision requests must require a name with an "
        "explicit revision id."
    )

    def check(self, schema: Schema) -> List[Finding]:
        findings: List[Finding] = []
        for method in schema.methods:
            if not DELETE_REVISION_PATTERN.match(method.name):
                continue
            request = schema.find_message(method.request_type, method.package)
            if request is None:
                continue
            problems = self._problems(request)
            if problems:
                findings.append(
                    self.finding(
                        method.location,
                        method.full_name,
                        L.rule.revisions.delete_requires_id.invalid,
                        method=method.name,
                        request=request.name,
                        problems="; ".join(problems),
                    )
                )
        return findings

    def _problems(self, request: Message) -> List[str]:
        name = request.field("name")
        if name is None:
            return ["request has no 'name' field"]

        problems: List[str] = []
        if not name.has_behavior(FieldBehavior.REQUIRED):
            problems.append("'name' is not annotated REQUIRED")
        if not _documents_revision(name.comment):
            problems.append(
                "'name' does not document that an explicit revision id is required"
            )
        return problems


def _documents_revision(comment: Optional[str]) -> bool:
    # Must ask for an explicit id and never describe a fallback revision.
    if not comment:
        return False
    text = comment.lower()
    if any(word in text for word in FALLBACK_WORDS):
        return False
    return any(word in text for word in EXPLICIT_WORDS)
