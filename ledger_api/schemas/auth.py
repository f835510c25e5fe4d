"""
Pydantic schemas for signup and login.

Signup happens through POST /accounts and returns the new account together
with a credential, so the caller is logged in straight away. Login takes the
public account number, not the internal id.
"""

from pydantic import BaseModel, Field

from ledger_api.schemas.account import AccountResponse


class LoginRequest(BaseModel):
    """Request body for POST /login."""
    number: int
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    """Response body for a successful login."""
    number: int
    token: str


class SignupResponse(BaseModel):
    """Response body for POST /accounts - the created account + credential."""
    account: AccountResponse
    token: str
