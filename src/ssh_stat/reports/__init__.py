"""Report rendering for ssh-stat.

Provides table, IP list and JSON views of the aggregated login results
using Jinja2 templates and rich tables.
"""

from .generator import ReportBuilder, build_table, format_table

__all__ = ["ReportBuilder", "build_table", "format_table"]
