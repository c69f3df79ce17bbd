import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from aipcheck.needle import L, catalog
from aipcheck.spec import Finding, RuleProtocol, Schema, Severity, SourceLocation

log = logging.getLogger(__name__)

INTERNAL_ERROR_RULE = "INTERNAL-ERROR"
INTERNAL_LOCATION = SourceLocation("<internal>", 0, 0)


@dataclass
class RuleEngine:
    rules: Sequence[RuleProtocol]
    jobs: int = 1
    severity_overrides: Dict[str, Severity] = field(default_factory=dict)

    def _run_rule(self, rule: RuleProtocol, schema: Schema) -> List[Finding]:
        try:
            findings = list(rule.check(schema))
        except Exception as e:
            # A broken rule must not take the others down with it.
            log.debug(f"Rule {rule.id} raised", exc_info=True)
            return [
                Finding(
                    rule_id=INTERNAL_ERROR_RULE,
                    severity=Severity.WARNING,
                    message=catalog.get(L.rule.internal_error).format(
                        rule=rule.id, error=f"{type(e).__name__}: {e}"
                    ),
                    location=INTERNAL_LOCATION,
                    symbol=rule.id,
                )
            ]

        override = self.severity_overrides.get(rule.id.upper())
        if override is not None:
            findings = [dataclasses.replace(f, severity=override) for f in findings]
        return findings

    def evaluate(self, schema: Schema) -> List[Finding]:
        """
        Runs every rule independently and concatenates their findings. With
        jobs > 1 the rules run on a thread pool; the result is sorted either
        way, so evaluation order never shows.
        """
        if self.jobs > 1 and len(self.rules) > 1:
            with ThreadPoolExecutor(max_workers=self.jobs) as executor:
                per_rule = list(
                    executor.map(lambda rule: self._run_rule(rule, schema), self.rules)
                )
        else:
            per_rule = [self._run_rule(rule, schema) for rule in self.rules]

        findings = [finding for batch in per_rule for finding in batch]
        return sorted(findings, key=lambda f: f.sort_key)


def create_rule_engine(
    rules: Sequence[RuleProtocol],
    jobs: int = 1,
    severity_overrides: Optional[Dict[str, Severity]] = None,
) -> RuleEngine:
    overrides = {k.upper(): v for k, v in (severity_overrides or {}).items()}
    return RuleEngine(
        rules=list(rules), jobs=max(1, jobs), severity_overrides=overrides
    )
