from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from aipcheck.common import bus
from aipcheck.needle import L, catalog
from aipcheck.analysis import (
    CheckResult,
    PluginLoadError,
    RuleRegistry,
    create_rule_engine,
    default_rules,
)
from aipcheck.config import AipcheckConfig, load_config_from_path
from aipcheck.spec import RuleProtocol
from aipcheck.app.runners import CheckReporter, CheckRunner
from aipcheck.app.services import BaselineManager


@dataclass
class CheckOutcome:
    success: bool
    output: str
    result: CheckResult


class AipcheckApp:
    def __init__(
        self,
        root_path: Path,
        config: Optional[AipcheckConfig] = None,
        registry: Optional[RuleRegistry] = None,
    ):
        self.root_path = root_path
        self.config = config or load_config_from_path(root_path)
        self.registry = registry or RuleRegistry(default_rules())
        self.reporter = CheckReporter()
        self.baseline_manager = BaselineManager()
        # Project-level message overrides in .aipcheck/needle/<lang>.
        catalog.set_project_root(self.config.root)
        self._load_plugins()

    def _load_plugins(self) -> None:
        for name, entry in sorted(self.config.plugins.items()):
            try:
                self.registry.load_plugin(entry)
            except (PluginLoadError, ValueError) as e:
                bus.error(L.error.plugin.load, name=name, error=e)

    def _resolve_config_path(self, value: str) -> Path:
        path = Path(value)
        if not path.is_absolute() and self.config.root is not None:
            path = self.config.root / path
        return path

    def _make_runner(
        self, rules: Optional[Sequence[str]], jobs: Optional[int]
    ) -> CheckRunner:
        selected = self.registry.select(
            rules if rules else self.config.rules, disable=self.config.disable
        )
        engine = create_rule_engine(
            selected,
            jobs=jobs if jobs is not None else self.config.jobs,
            severity_overrides=self.config.severity,
        )
        return CheckRunner(engine, self.reporter, self.baseline_manager)

    def run_check(
        self,
        target: Optional[Path] = None,
        rules: Optional[Sequence[str]] = None,
        fmt: Optional[str] = None,
        baseline: Optional[Path] = None,
        jobs: Optional[int] = None,
    ) -> CheckOutcome:
        """
        Loads, evaluates and reports. Raises UnknownRuleError or
        UnknownFormatError before any file is read.
        """
        output_format = self.reporter.validate_format(fmt or self.config.format)
        runner = self._make_runner(rules, jobs)

        if baseline is None and self.config.baseline:
            baseline = self._resolve_config_path(self.config.baseline)

        result = runner.run(
            target or self.root_path, exclude=self.config.exclude, baseline=baseline
        )
        output = runner.report(result, output_format)
        success = self.reporter.summarize(result)
        return CheckOutcome(success=success, output=output, result=result)

    def run_baseline(
        self,
        target: Optional[Path] = None,
        output: Optional[Path] = None,
        rules: Optional[Sequence[str]] = None,
    ) -> Path:
        runner = self._make_runner(rules, None)
        result = runner.run(target or self.root_path, exclude=self.config.exclude)

        if output is None:
            output = (
                self._resolve_config_path(self.config.baseline)
                if self.config.baseline
                else self.root_path / "aipcheck-baseline.yaml"
            )
        self.baseline_manager.save(output, result.findings)
        bus.success(L.baseline.run.saved, count=len(result.findings), path=output)
        return output

    def list_rules(self) -> List[RuleProtocol]:
        return self.registry.rules
