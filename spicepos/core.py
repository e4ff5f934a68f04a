import time
import uuid
from datetime import datetime
from typing import Literal, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ProductForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class ProductIn(_ProductForm):
    name: str = Field(min_length=1)
    category: Optional[str] = ""
    price_lkr: float = Field(ge=0, allow_inf_nan=False)
    unit: str = Field(min_length=1)
    stock: float = Field(allow_inf_nan=False)


class ProductUpdate(_ProductForm):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    price_lkr: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    unit: Optional[str] = Field(default=None, min_length=1)
    stock: Optional[float] = Field(default=None, allow_inf_nan=False)

    @field_validator("price_lkr", "stock", mode="before")
    @classmethod
    def _blank_is_missing(cls, v):
        # edit forms post every field; an empty number box means "unchanged"
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Flash(BaseModel):
    message: str
    message_type: Literal["success", "warning", "error"] = "success"


def generate_unique_id(prefix: str = "") -> str:
    millis = int(time.time() * 1000)
    return f"{prefix}{millis}_{uuid.uuid4().hex[:8]}"


def current_timestamp(timezone: str) -> str:
    return datetime.now(ZoneInfo(timezone)).isoformat(timespec="seconds")


def today(timezone: str) -> str:
    return datetime.now(ZoneInfo(timezone)).date().isoformat()
