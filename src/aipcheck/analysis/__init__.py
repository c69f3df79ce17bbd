from .engines.rules import INTERNAL_ERROR_RULE, RuleEngine, create_rule_engine
from .registry import PluginLoadError, RuleRegistry, UnknownRuleError
from .rules import default_rules
from .schema import CheckResult

__all__ = [
    "INTERNAL_ERROR_RULE",
    "RuleEngine",
    "create_rule_engine",
    "PluginLoadError",
    "RuleRegistry",
    "UnknownRuleError",
    "default_rules",
    "CheckResult",
]
