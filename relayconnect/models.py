from pydantic import BaseModel, Field

from .database import database


class ProductModel(BaseModel):
    name: str = Field(min_length=1)
    # Minor currency units, so ordering and filtering stay exact
    price: int = Field(ge=0)


MODELS = {"products": ProductModel}
database.populate_tables(MODELS)
