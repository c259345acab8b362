"""Audit logging package."""

from chitledger.audit.logger import AuditLogger, get_logger

__all__ = ["AuditLogger", "get_logger"]
