from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InquiryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    unit_id: int = Field(..., alias="unitId")
    message: str = Field(..., min_length=1, max_length=5000)


class InquiryReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    inquiry_id: int = Field(..., alias="inquiryId")
    message: str = Field(..., min_length=1, max_length=5000)
    # Defaults to the other participant of the parent inquiry
    recipient_user_id: Optional[int] = Field(None, alias="recipientUserId")
