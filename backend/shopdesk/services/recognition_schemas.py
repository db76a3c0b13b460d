# Overview: Typed payloads returned by the recognition service.

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvoiceItem(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    name: str = Field(..., min_length=1)
    cost: float = Field(..., ge=0, description="Unit cost in currency units")
    quantity: float = Field(..., gt=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name cannot be blank")
        return value


class InvoiceData(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    date: Optional[str] = Field(None, description="Purchase date, YYYY-MM-DD")
    total: Optional[float] = Field(None, ge=0)
    items: list[InvoiceItem] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def _blank_date_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class ProductGuess(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    estimated_price: Optional[float] = Field(None, alias="estimatedPrice", ge=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip()


# JSON response schemas sent to the model (Gemini OpenAPI subset)
INVOICE_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "date": {"type": "STRING", "description": "Date of purchase in YYYY-MM-DD format"},
        "total": {"type": "NUMBER", "description": "Total amount of the invoice"},
        "items": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "cost": {"type": "NUMBER"},
                    "quantity": {"type": "NUMBER"},
                },
            },
        },
    },
}

PRODUCT_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING"},
        "category": {"type": "STRING"},
        "estimatedPrice": {"type": "NUMBER"},
    },
}
