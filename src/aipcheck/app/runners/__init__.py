from .check import CheckReporter, CheckRunner, UnknownFormatError

__all__ = ["CheckReporter", "CheckRunner", "UnknownFormatError"]
