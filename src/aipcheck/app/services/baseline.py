import logging
from pathlib import Path
from typing import Iterable, List, Set, Tuple

import yaml

from aipcheck.spec import Finding

log = logging.getLogger(__name__)

BaselineKey = Tuple[str, str, str]

BASELINE_VERSION = 1


def baseline_key(finding: Finding) -> BaselineKey:
    # Line numbers are left out so unrelated edits do not invalidate entries.
    return (finding.rule_id, finding.location.file, finding.symbol or finding.message)


class BaselineManager:
    """Reads and writes the YAML list of accepted findings."""

    def load(self, path: Path) -> Set[BaselineKey]:
        if not path.exists():
            return set()

        try:
            with path.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            log.warning(f"Ignoring unreadable baseline {path}: {e}")
            return set()

        if not isinstance(content, dict):
            return set()

        entries: Set[BaselineKey] = set()
        for item in content.get("findings") or []:
            if not isinstance(item, dict):
                continue
            rule = item.get("rule")
            file = item.get("file")
            if not rule or not file:
                continue
            entries.add((str(rule), str(file), str(item.get("symbol") or "")))
        return entries

    def dump(self, findings: Iterable[Finding]) -> str:
        keys = sorted({baseline_key(f) for f in findings})
        data = {
            "version": BASELINE_VERSION,
            "findings": [
                {"rule": rule, "file": file, "symbol": symbol}
                for rule, file, symbol in keys
            ],
        }
        return yaml.safe_dump(
            data, allow_unicode=True, default_flow_style=False, sort_keys=False
        )

    def save(self, path: Path, findings: Iterable[Finding]) -> None:
        new_content = self.dump(findings)
        if path.exists():
            try:
                if path.read_text(encoding="utf-8") == new_content:
                    return
            except (OSError, UnicodeDecodeError):
                pass
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(new_content, encoding="utf-8")

    def filter(
        self, findings: Iterable[Finding], entries: Set[BaselineKey]
    ) -> Tuple[List[Finding], List[Finding]]:
        """Splits findings into (kept, suppressed)."""
        kept: List[Finding] = []
        suppressed: List[Finding] = []
        for finding in findings:
            if baseline_key(finding) in entries:
                suppressed.append(finding)
            else:
                kept.append(finding)
        return kept, suppressed
