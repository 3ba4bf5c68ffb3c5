# core/exceptions.py
"""
Custom exceptions for the backend
"""
from typing import List, Optional


class FieldScanError(Exception):
    """Base exception for the FieldScan backend"""
    pass

class AgentError(FieldScanError):
    """Agent-related errors"""
    pass

class InputError(FieldScanError):
    """Empty or invalid user input; the user should retry with new input"""
    pass

class ConfigurationError(FieldScanError):
    """Missing credentials or model list; fatal for classification only"""
    pass

class ClassificationUnavailable(AgentError):
    """Every classifier model candidate failed"""

    def __init__(self, message: str, last_error: Optional[BaseException] = None,
                 attempted: Optional[List[str]] = None):
        super().__init__(message)
        self.last_error = last_error
        self.attempted = list(attempted or [])

class MalformedResponse(AgentError):
    """Classifier output could not be turned into a structured result"""

    def __init__(self, message: str, raw_excerpt: str = ""):
        super().__init__(message)
        self.raw_excerpt = raw_excerpt

class OwnerNotFound(FieldScanError):
    """Task append/delete target list or plan does not exist"""

    def __init__(self, owner_id: str):
        super().__init__(f"No list or plan with id {owner_id!r}")
        self.owner_id = owner_id

class StoreError(FieldScanError):
    """Persisted store document could not be read or written"""
    pass
