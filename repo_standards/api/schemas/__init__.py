"""
Pydantic schemas for API responses.
"""

# Re-export schemas for convenient imports.
from .standards import CiSystemListResponse as CiSystemListResponse
from .standards import HealthResponse as HealthResponse
from .standards import StackListResponse as StackListResponse
from .standards import StackSummary as StackSummary
