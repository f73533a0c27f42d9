"""
ssh-stat - Get stats on SSH login attempts from an auth log.

This package parses sshd "Failed" and "Accepted" login lines, aggregates
them per source IP in parallel, and renders ranked reports.

Features:
- Bounded-concurrency parsing of large auth logs
- Per-IP merge of failed and accepted attempts
- Lookback window filtering (e.g. 4d2h5m3s)
- Table, IP list and JSON output
- Configuration via flags, environment variables or YAML
"""

__version__ = "0.2.0"
__all__ = ["__version__"]
