from dataclasses import dataclass, field
from typing import List

from aipcheck.spec import Finding, Severity


@dataclass
class CheckResult:
    # All reported findings (errors and warnings), after suppression.
    findings: List[Finding] = field(default_factory=list)

    # Findings dropped because the baseline lists them.
    suppressed: List[Finding] = field(default_factory=list)

    files_checked: int = 0

    @property
    def errors(self) -> List[Finding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def is_clean(self) -> bool:
        return not self.findings
