from .core import AipcheckApp, CheckOutcome

__all__ = ["AipcheckApp", "CheckOutcome"]
