from .reporter import CheckReporter, JsonFormatter, TextFormatter, UnknownFormatError
from .runner import PARSE_ERROR_RULE, CheckRunner

__all__ = [
    "CheckReporter",
    "JsonFormatter",
    "TextFormatter",
    "UnknownFormatError",
    "PARSE_ERROR_RULE",
    "CheckRunner",
]
