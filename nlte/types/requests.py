from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ParseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    command: Optional[str] = Field(default=None, description="Natural language command")
    user_id: Optional[str] = Field(default=None, alias="userId", description="Optional caller identifier")
    user_address: Optional[str] = Field(
        default=None,
        alias="userAddress",
        description="Wallet address used to resolve contact names",
    )


class DraftRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    parsed_command: Optional[Dict[str, Any]] = Field(
        default=None,
        alias="parsedCommand",
        description="Result of /nlte/parse",
    )
    user_address: Optional[str] = Field(default=None, alias="userAddress", description="Sender wallet address")


class ContactCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_address: str = Field(alias="userAddress", description="Owner of the contact book")
    name: str = Field(description="Display name")
    address: str = Field(description="Contact wallet address")


class ScheduledTransferRequest(BaseModel):
    """Either a scheduled SEND parsed command or explicit fields."""

    model_config = ConfigDict(populate_by_name=True)

    user_address: str = Field(alias="userAddress", description="Owner of the transfer")
    parsed_command: Optional[Dict[str, Any]] = Field(default=None, alias="parsedCommand")
    recipient_address: Optional[str] = Field(default=None, alias="recipientAddress")
    recipient_name: Optional[str] = Field(default=None, alias="recipientName")
    amount: Optional[str] = None
    token: Optional[str] = None
    scheduled_time: Optional[int] = Field(default=None, alias="scheduledTime", description="ms epoch")
    auto_approved: bool = Field(default=False, alias="autoApproved")
