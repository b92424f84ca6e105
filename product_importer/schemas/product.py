from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional

class ProductResponse(BaseModel):
    external_id: str
    name: str
    active_price: Decimal
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ImportResult(BaseModel):
    created_count: int = Field(0, alias="createdCount")
    updated_count: int = Field(0, alias="updatedCount")

    class Config:
        populate_by_name = True
