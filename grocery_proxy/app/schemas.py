from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from grocery_proxy.pricing.units import parse_size_to_kg


class ProductRecord(BaseModel):
    """One normalized search result. ``pricePerKg`` is always derived from ``price`` and ``size``."""

    model_config = ConfigDict(frozen=True)

    product: str = ""
    size: str = ""
    price: Optional[float] = None
    url: Optional[str] = None
    id: str = ""

    @computed_field(alias="pricePerKg")
    @property
    def price_per_kg(self) -> Optional[float]:
        kg = parse_size_to_kg(self.size)
        if not kg or not self.price:
            return None
        return round(self.price / kg, 2)


class AttributedRecord(ProductRecord):
    store: Optional[str] = None  # None when the provider could not be determined

    @classmethod
    def from_record(cls, record: ProductRecord, store: Optional[str]) -> "AttributedRecord":
        return cls(store=store, **record.model_dump(exclude={"price_per_kg"}))


class ComparisonResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cheapest_by_item: Optional[AttributedRecord] = Field(default=None, alias="cheapestByItem")
    cheapest_by_kg: Optional[AttributedRecord] = Field(default=None, alias="cheapestByKg")


class CheapestResponse(ComparisonResult):
    query: str


class BatchItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    cheapest_per_kg: Optional[AttributedRecord] = Field(default=None, alias="cheapestPerKg")
    error: Optional[str] = None  # set when this item's provider calls failed


class BatchResponse(BaseModel):
    items: List[BatchItem]


class HealthResponse(BaseModel):
    ok: bool = True
    time: str
