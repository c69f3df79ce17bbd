import importlib
import logging
from typing import Any, Dict, Iterable, List, Optional

from aipcheck.spec import RuleProtocol

log = logging.getLogger(__name__)


class UnknownRuleError(ValueError):
    def __init__(self, name: str):
        super().__init__(f"Unknown rule or group: {name}")
        self.name = name


class PluginLoadError(Exception):
    def __init__(self, entry: str, reason: str):
        super().__init__(f"Could not load rule plugin '{entry}': {reason}")
        self.entry = entry
        self.reason = reason


def _is_rule(obj: Any) -> bool:
    return callable(getattr(obj, "check", None)) and isinstance(
        getattr(obj, "id", None), str
    )


class RuleRegistry:
    def __init__(self, rules: Optional[Iterable[RuleProtocol]] = None):
        self._rules: Dict[str, RuleProtocol] = {}
        for rule in rules or ():
            self.register(rule)

    def register(self, rule: RuleProtocol) -> None:
        key = rule.id.upper()
        if key in self._rules:
            raise ValueError(f"Rule '{rule.id}' is already registered.")
        self._rules[key] = rule

    def __contains__(self, rule_id: str) -> bool:
        return rule_id.upper() in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def get(self, rule_id: str) -> RuleProtocol:
        try:
            return self._rules[rule_id.upper()]
        except KeyError:
            raise UnknownRuleError(rule_id) from None

    @property
    def rules(self) -> List[RuleProtocol]:
        return [self._rules[key] for key in sorted(self._rules)]

    @property
    def groups(self) -> List[str]:
        return sorted({rule.group.lower() for rule in self._rules.values()})

    def _expand(self, selector: str) -> List[RuleProtocol]:
        name = selector.strip()
        if name.upper() in self._rules:
            return [self._rules[name.upper()]]
        matched = [r for r in self.rules if r.group.lower() == name.lower()]
        if not matched:
            raise UnknownRuleError(name)
        return matched

    def select(
        self,
        selectors: Optional[Iterable[str]] = None,
        disable: Optional[Iterable[str]] = None,
    ) -> List[RuleProtocol]:
        """
        Resolves rule ids and group names to rules, sorted by id. No
        selectors means every registered rule. Raises UnknownRuleError.
        """
        wanted = [s for s in (selectors or ()) if s.strip()]
        chosen: Dict[str, RuleProtocol] = {}
        if wanted:
            for selector in wanted:
                for rule in self._expand(selector):
                    chosen[rule.id.upper()] = rule
        else:
            chosen = dict(self._rules)

        for selector in disable or ():
            if not selector.strip():
                continue
            for rule in self._expand(selector):
                chosen.pop(rule.id.upper(), None)

        return [chosen[key] for key in sorted(chosen)]

    def load_plugin(self, entry: str) -> List[RuleProtocol]:
        """
        Registers rules from "module:attr". The attribute may be a rule, an
        iterable of rules, or a callable returning either.
        """
        module_name, _, attr = entry.partition(":")
        try:
            target: Any = importlib.import_module(module_name)
            for part in filter(None, attr.split(".")):
                target = getattr(target, part)
        except Exception as e:
            # Plugin imports run third-party code; any failure is a load error.
            raise PluginLoadError(entry, f"{type(e).__name__}: {e}") from e

        if not _is_rule(target) and callable(target):
            try:
                target = target()
            except Exception as e:
                raise PluginLoadError(entry, f"{type(e).__name__}: {e}") from e
        if _is_rule(target):
            candidates = [target]
        else:
            try:
                candidates = list(target or ())
            except TypeError:
                raise PluginLoadError(entry, f"{target!r} is not a rule") from None

        loaded: List[RuleProtocol] = []
        for candidate in candidates:
            if not _is_rule(candidate):
                raise PluginLoadError(entry, f"{candidate!r} is not a rule")
            self.register(candidate)
            loaded.append(candidate)
        log.debug(f"Loaded {len(loaded)} rule(s) from plugin {entry}")
        return loaded
