"""
Pydantic schemas for Account endpoints.

Field names are snake_case in Python and camelCase on the wire
(``firstName``, ``createdAt``...). The password hash is never part of any
response schema. Balances are integers in the smallest currency unit.
"""

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class AccountCreateRequest(BaseModel):
    """Request body for POST /accounts."""
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class AccountResponse(BaseModel):
    """Public representation of an account."""
    id: int
    first_name: str
    last_name: str
    number: int
    balance: int
    created_at: datetime

    model_config = {
        "from_attributes": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class AccountDeletedResponse(BaseModel):
    """Response body for DELETE /accounts/{id}."""
    message: str
