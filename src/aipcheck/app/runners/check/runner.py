from pathlib import Path
from typing import List, Optional, Sequence, Set

from aipcheck.common import bus
from aipcheck.needle import L
from aipcheck.analysis import CheckResult, RuleEngine
from aipcheck.app.services import BaselineManager
from aipcheck.app.services.baseline import BaselineKey
from aipcheck.loader import LoadResult, ParseError, discover_proto_files, load_schema
from aipcheck.spec import Finding, Severity, SourceLocation

from .reporter import CheckReporter, sort_findings

PARSE_ERROR_RULE = "PARSE-ERROR"


def parse_error_finding(error: ParseError) -> Finding:
    return Finding(
        rule_id=PARSE_ERROR_RULE,
        severity=Severity.ERROR,
        message=error.message,
        location=SourceLocation(error.path, error.line, error.column),
        symbol=error.path,
    )


class CheckRunner:
    def __init__(
        self,
        engine: RuleEngine,
        reporter: CheckReporter,
        baseline_manager: Optional[BaselineManager] = None,
    ):
        self.engine = engine
        self.reporter = reporter
        self.baseline_manager = baseline_manager or BaselineManager()

    def load(self, target: Path, exclude: Sequence[str] = ()) -> LoadResult:
        base = target if target.is_dir() else target.parent
        files = discover_proto_files(target, exclude)
        if not files:
            bus.warning(L.check.file.none_found, path=target)
        else:
            bus.debug(L.check.file.discovered, count=len(files), path=target)

        result = load_schema(files, base=base)
        for error in result.errors:
            bus.error(
                L.check.file.parse_error,
                path=error.path,
                line=error.line,
                error=error.message,
            )
        return result

    def analyze(self, loaded: LoadResult) -> List[Finding]:
        findings = self.engine.evaluate(loaded.schema)
        findings.extend(parse_error_finding(e) for e in loaded.errors)
        return sort_findings(findings)

    def run(
        self,
        target: Path,
        exclude: Sequence[str] = (),
        baseline: Optional[Path] = None,
    ) -> CheckResult:
        loaded = self.load(target, exclude)
        findings = self.analyze(loaded)

        suppressed: List[Finding] = []
        if baseline is not None:
            entries: Set[BaselineKey] = self.baseline_manager.load(baseline)
            bus.debug(L.check.baseline.loaded, count=len(entries), path=baseline)
            findings, suppressed = self.baseline_manager.filter(findings, entries)

        return CheckResult(
            findings=findings,
            suppressed=suppressed,
            files_checked=len(loaded.schema.files) + len(loaded.errors),
        )

    def report(self, result: CheckResult, fmt: str = "text") -> str:
        return self.reporter.render(result.findings, fmt)
