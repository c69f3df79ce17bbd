from typing import Any, List, Union

from aipcheck.needle import SemanticPointer, catalog
from aipcheck.spec import Finding, Schema, Severity, SourceLocation


class BaseRule:
    """
    Shared plumbing for the built-in rules. Subclasses set the class
    attributes and implement ``check``; they must only read the schema.
    """

    id: str = ""
    group: str = ""
    severity: Severity = Severity.ERROR
    summary: str = ""

    def check(self, schema: Schema) -> List[Finding]:
        raise NotImplementedError

    def finding(
        self,
        location: SourceLocation,
        symbol: str,
        msg_id: Union[SemanticPointer, str],
        **kwargs: Any,
    ) -> Finding:
        return Finding(
            rule_id=self.id,
            severity=self.severity,
            message=catalog.get(msg_id).format(**kwargs),
            location=location,
            symbol=symbol,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
