"""
Pydantic schemas for the transfer endpoint.

``to`` is the destination account NUMBER; ``value`` is in the smallest
currency unit.
"""

from pydantic import BaseModel, Field


class TransferRequest(BaseModel):
    """Request body (and echoed response) for POST /transfer."""
    to: int
    value: int = Field(gt=0, description="Amount in the smallest currency unit")
