from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CatalogItem(BaseModel):
    """
    One product as served by the remote catalog.

    Wire keys are the catalog's (product_id, image); fields are lenient on
    purpose, the import reconciler decides what is valid.
    """
    id: Optional[str] = Field(None, alias="product_id")
    name: Optional[str] = None
    price: Optional[Decimal] = None
    image_url: Optional[str] = Field(None, alias="image")
    description: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # some catalogs serve numeric ids
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value)) if float(value).is_integer() else str(value)
        return value


class CatalogItemResponse(BaseModel):
    product_id: str
    name: str
    price: Decimal
    image: str = ""
    description: str = ""

    @classmethod
    def from_item(cls, item: CatalogItem) -> "CatalogItemResponse":
        return cls(
            product_id=item.id or "",
            name=item.name or "",
            price=item.price if item.price is not None else Decimal("0"),
            image=item.image_url or "",
            description=item.description or "",
        )
