from pydantic import BaseModel, Field


# --- Variant schemas ---

class VariantIn(BaseModel):
    # Set when an existing variant is sent back; used to tell kept stock from new stock
    id: int | None = None
    name: str
    stock: int = 0
    price_adjustment: float = 0.0


class VariantOut(BaseModel):
    id: int
    product_id: int
    name: str
    stock: int
    price_adjustment: float

    model_config = {"from_attributes": True}


# --- Product schemas ---

class ProductIn(BaseModel):
    """Body of both POST and PUT; PUT replaces the whole variant set."""

    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    # Negative only when sent back unchanged after an oversell
    stock: int = 0
    category_id: int | None = None
    image_url: str | None = None
    variants: list[VariantIn] | None = None
    updated_at: int | None = None


class ProductOut(BaseModel):
    id: int
    name: str
    price: float
    stock: int
    total_stock: int
    category_id: int | None = None
    category_name: str | None = None
    image_url: str | None = None
    updated_at: int
    variants: list[VariantOut] = []

    model_config = {"from_attributes": True}


class SaveResult(BaseModel):
    success: bool = True
    updated_at: int


class CreateResult(BaseModel):
    id: int
    updated_at: int
