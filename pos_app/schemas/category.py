from pydantic import BaseModel, field_validator


class CategoryIn(BaseModel):
    name: str
    updated_at: int | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category name is required")
        return v


class CategoryOut(BaseModel):
    id: int
    name: str
    updated_at: int

    model_config = {"from_attributes": True}
