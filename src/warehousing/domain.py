"""Warehousing bounded context — multi-warehouse stock ledgers.

Tracks per-warehouse inventory ledgers (quantity vs. reserved), reviewed
inventory adjustments, inter-warehouse stock transfers, and derives
low-stock alerts and fleet statistics from live ledger state.
"""

import structlog
from protean.domain import Domain

warehousing = Domain(name="warehousing")

logger = structlog.get_logger(__name__)
