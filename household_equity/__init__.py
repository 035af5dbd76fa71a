"""
Household Equity - Source Package

Tracks shared finances between the two members of a household and answers,
every month:
1. What share of shared costs each member should bear
2. Who owes whom, given what was actually paid
3. Whether the savings goals are still on schedule

DESIGN PRINCIPLES:
1. Shares follow disposable income, not a fixed 50/50
2. The engine is pure: records in, results out
3. No silent corrections: invalid records are rejected, not fixed
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Equity Team"
