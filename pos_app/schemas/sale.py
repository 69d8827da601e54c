from pydantic import BaseModel, Field


class CartLine(BaseModel):
    """One cart line as the terminal sends it. ``price`` already includes any variant adjustment."""

    id: int  # product id
    selected_variant_id: int | None = None
    quantity: int = Field(gt=0)
    price: float

    model_config = {"extra": "ignore"}


class CheckoutRequest(BaseModel):
    items: list[CartLine] = Field(min_length=1)
    total: float


class CheckoutResult(BaseModel):
    success: bool = True
    saleId: int
