# spicepos/models.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class Product(BaseModel):
    id: str
    name: str
    category: Optional[str] = ""
    price_lkr: float = Field(ge=0, allow_inf_nan=False)
    unit: str
    stock: float = 0.0

    @field_validator("stock")
    @classmethod
    def _clamp_stock(cls, v: float) -> float:
        return max(0.0, v)


class LineItem(BaseModel):
    product_id: str
    name: str
    unit: str
    price_at_sale_lkr: float = Field(ge=0, allow_inf_nan=False)
    quantity: float = Field(gt=0, allow_inf_nan=False)


class Sale(BaseModel):
    sale_id: str
    timestamp: str
    items: List[LineItem]
    total_lkr: float

    @property
    def sale_date(self) -> str:
        # timestamps are ISO 8601, so the first ten characters are YYYY-MM-DD
        return self.timestamp[:10]


class DailyReport(BaseModel):
    date: str
    number_of_sales: int
    total_revenue: float
