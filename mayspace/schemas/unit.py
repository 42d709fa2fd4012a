from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UnitIn(BaseModel):
    """Create/update body. ``images`` holds stored paths and/or base64 data URLs."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    building_name: str = Field(..., alias="buildingName", min_length=1, max_length=255)
    unit_number: str = Field(..., alias="unitNumber", min_length=1, max_length=50)
    specifications: str = Field(..., alias="specs", min_length=1)
    location: Optional[str] = Field(None, max_length=255)
    special_features: Optional[str] = Field(None, alias="specialFeatures")
    unit_price: Optional[float] = Field(None, alias="unitPrice", ge=0)
    contact_person: Optional[str] = Field(None, alias="contactPerson", max_length=255)
    phone_number: Optional[str] = Field(None, alias="phoneNumber", max_length=30)
    images: List[str] = Field(default_factory=list)
