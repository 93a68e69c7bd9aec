"""Output formatters for plans, reports and calibration."""

from lifeplan.export.formatters import JSONFormatter, MarkdownFormatter, TableFormatter

__all__ = ["TableFormatter", "JSONFormatter", "MarkdownFormatter"]
