"""Core models and configuration for the Bill Generator."""

from billgen.core.models import BillConfig, BillRecord, CellMapping, DateMode, ErrorResponse

__all__ = ["BillConfig", "BillRecord", "CellMapping", "DateMode", "ErrorResponse"]
