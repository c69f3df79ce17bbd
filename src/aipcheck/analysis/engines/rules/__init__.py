from .engine import INTERNAL_ERROR_RULE, RuleEngine, create_rule_engine

__all__ = ["INTERNAL_ERROR_RULE", "RuleEngine", "create_rule_engine"]
