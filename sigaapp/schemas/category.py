# sigaapp/schemas/category.py
from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class Category(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    nombre: str
    descripcion: Optional[str] = None


class CategoryRequest(BaseModel):
    nombre: str
    descripcion: Optional[str] = None


class CategoriesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    categorias: List[Category] = []


class CategoryResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    categoria: Category
