from .baseline import BaselineManager, baseline_key

__all__ = ["BaselineManager", "baseline_key"]
