"""
Cash Ledger - Source Package

A single-user personal ledger: dated inflow/outflow entries, running
balances, period statistics and printable reports.

DESIGN PRINCIPLES:
1. Running balances accumulate oldest date first, always
2. Totals cover the whole period, whatever the list is filtered by
3. No write is reported as saved unless the store accepted it
4. Every operation names its identity explicitly
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Cash Ledger Team"
