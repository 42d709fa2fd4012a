from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mayspace.models.booking import TransactionType


class BookingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    unit_id: int = Field(..., alias="unitId")
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)
    contact_number: str = Field(..., alias="contactNumber", min_length=1, max_length=30)
    number_of_people: int = Field(..., alias="numberOfPeople", ge=1)
    transaction: TransactionType = TransactionType.ONLINE
    date_visiting: date = Field(..., alias="dateVisiting")

    @field_validator("transaction", mode="before")
    @classmethod
    def normalize_transaction(cls, v):
        # The web client sends "Online" / "Walk-in"
        if isinstance(v, str):
            return v.strip().lower().replace(" ", "-").replace("walkin", "walk-in")
        return v


class BookingStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)
