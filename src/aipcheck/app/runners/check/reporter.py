import json
from typing import Dict, List, Sequence

from aipcheck.common import bus
from aipcheck.needle import L
from aipcheck.analysis.schema import CheckResult
from aipcheck.spec import Finding, ReportFormatterProtocol


class UnknownFormatError(ValueError):
    def __init__(self, name: str):
        super().__init__(f"Unknown output format: {name}")
        self.name = name


def sort_findings(findings: Sequence[Finding]) -> List[Finding]:
    return sorted(findings, key=lambda f: f.sort_key)


class TextFormatter:
    def format(self, findings: Sequence[Finding]) -> str:
        lines = [
            f"{f.severity.value}: {f.location}: {f.rule_id}: {f.message}"
            for f in sort_findings(findings)
        ]
        return "".join(f"{line}\n" for line in lines)


class JsonFormatter:
    def format(self, findings: Sequence[Finding]) -> str:
        payload = [f.to_dict() for f in sort_findings(findings)]
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


class CheckReporter:
    def __init__(self):
        self.formatters: Dict[str, ReportFormatterProtocol] = {
            "text": TextFormatter(),
            "json": JsonFormatter(),
        }

    def validate_format(self, fmt: str) -> str:
        name = fmt.lower()
        if name not in self.formatters:
            raise UnknownFormatError(fmt)
        return name

    def render(self, findings: Sequence[Finding], fmt: str = "text") -> str:
        return self.formatters[self.validate_format(fmt)].format(findings)

    def summarize(self, result: CheckResult) -> bool:
        if result.suppressed:
            bus.info(L.check.baseline.suppressed, count=len(result.suppressed))

        if result.has_errors:
            bus.error(
                L.check.run.fail,
                errors=result.error_count,
                warnings=result.warning_count,
            )
            return False
        if result.warning_count:
            bus.success(L.check.run.success_with_warnings, count=result.warning_count)
        else:
            bus.success(L.check.run.success, files=result.files_checked)
        return True
