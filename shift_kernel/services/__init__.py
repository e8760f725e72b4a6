"""Kernel service infrastructure."""

from shift_kernel.services.base import BaseService

__all__ = ["BaseService"]
