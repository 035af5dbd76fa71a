"""
Equity Engine

Pure, synchronous computations over immutable record snapshots.
No I/O, no shared state: safe to call concurrently.
"""

from household_equity.engine.aggregator import (
    BALANCED_MESSAGE,
    compute_monthly_status,
    describe_settlement,
)
from household_equity.engine.participation import calculate_participation
from household_equity.engine.savings import (
    AllocationStrategy,
    EqualSplitAllocation,
    get_allocation_strategy,
    recalculate_savings_goal,
)
from household_equity.engine.settlement import (
    SETTLEMENT_TOLERANCE,
    calculate_proportional_debt,
)

__all__ = [
    "AllocationStrategy",
    "BALANCED_MESSAGE",
    "EqualSplitAllocation",
    "SETTLEMENT_TOLERANCE",
    "calculate_participation",
    "calculate_proportional_debt",
    "compute_monthly_status",
    "describe_settlement",
    "get_allocation_strategy",
    "recalculate_savings_goal",
]
