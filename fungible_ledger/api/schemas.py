"""
Pydantic schemas for API requests
"""

from pydantic import BaseModel, ConfigDict, Field


class CreateTokenRequest(BaseModel):
    supply: str = Field(..., description="Initial supply as a decimal string")


class TransferRequest(BaseModel):
    to: str = Field(..., description="Recipient address (account or registered alias)")
    amount: str = Field(..., description="Amount as a decimal string")


class ApproveRequest(BaseModel):
    spender: str = Field(..., description="Spender address (account or registered alias)")
    value: str = Field(..., description="Allowance as a decimal string")


class TransferFromRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_account: str = Field(..., alias="from", description="Owner account being debited")
    to: str = Field(..., description="Recipient account")
    value: str = Field(..., description="Amount as a decimal string")


class RegisterAliasRequest(BaseModel):
    alias: str
    account: str
