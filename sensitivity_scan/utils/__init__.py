from .logger import ScanAuditLogger, SessionStats

__all__ = ["ScanAuditLogger", "SessionStats"]
