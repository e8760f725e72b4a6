"""
shift_services -- stateful orchestration over the shift engines and kernel.

Usage:
    from shift_services import ShiftSettlementService
"""

from shift_services.settlement_service import ShiftSettlementService

__all__ = ["ShiftSettlementService"]
