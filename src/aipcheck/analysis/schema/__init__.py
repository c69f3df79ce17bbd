from .results import CheckResult

__all__ = ["CheckResult"]
