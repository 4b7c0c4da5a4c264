# sigaapp/schemas/product.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN

SIN_PRECIO = "Sin precio"


def format_clp(value: Decimal) -> str:
    """Formato peso chileno sin decimales: 12500 -> $12.500"""
    entero = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_EVEN))
    signo = "-" if entero < 0 else ""
    return f"{signo}${abs(entero):,}".replace(",", ".")


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    nombre: str
    descripcion: Optional[str] = None
    # El backend envía el precio como texto; `precio` es el respaldo entero
    precio_unitario: Optional[str] = Field(None, alias="precioUnitario")
    precio: Optional[int] = None
    activo: bool = True
    codigo: Optional[str] = None

    @field_validator("precio_unitario", mode="before")
    @classmethod
    def precio_como_texto(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def resolve_precio(self) -> Optional[Decimal]:
        """Precio del texto (acepta coma decimal), si no el entero, si no None"""
        if self.precio_unitario is not None:
            normalized = self.precio_unitario.strip().replace(",", ".")
            try:
                value = Decimal(normalized)
            except InvalidOperation:
                value = None
            if value is not None and value.is_finite():
                return value
        if self.precio is not None:
            return Decimal(self.precio)
        return None

    def get_precio_int(self) -> int:
        if self.precio_unitario is not None:
            try:
                return int(self.precio_unitario)
            except ValueError:
                pass
        return self.precio if self.precio is not None else 0

    def get_precio_display(self) -> str:
        value = self.resolve_precio()
        return format_clp(value) if value is not None else SIN_PRECIO


class ProductRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nombre: str
    # El backend espera el precio como String, no Int
    precio_unitario: str = Field(..., alias="precioUnitario")
    descripcion: Optional[str] = None
    categoria_id: Optional[int] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    producto: Product


class ProductosListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    productos: List[Product] = []


class ProductForm(BaseModel):
    """Datos del diálogo de crear/editar producto, validados antes de llamar al view model"""

    nombre: str
    precio: int
    descripcion: Optional[str] = None
    stock: Optional[int] = None

    @field_validator("nombre")
    @classmethod
    def nombre_obligatorio(cls, v):
        if not v or not v.strip():
            raise ValueError("El nombre es obligatorio")
        return v.strip()

    @field_validator("precio")
    @classmethod
    def precio_positivo(cls, v):
        if v <= 0:
            raise ValueError("Ingrese un precio válido")
        return v

    @field_validator("descripcion")
    @classmethod
    def descripcion_vacia_es_none(cls, v):
        if v is None or not v.strip():
            return None
        return v

    @field_validator("stock")
    @classmethod
    def stock_no_negativo(cls, v):
        if v is not None and v < 0:
            raise ValueError("Ingrese una cantidad válida")
        return v

    @staticmethod
    def collect_errors(
        nombre: str,
        precio: str,
        stock: Optional[str] = None,
        editing: bool = False
    ) -> Dict[str, str]:
        """
        Valida los textos crudos del formulario.
        Devuelve {campo: mensaje}; vacío si todo está bien.
        El stock solo se valida al editar un item existente.
        """
        errors: Dict[str, str] = {}

        if not nombre or not nombre.strip():
            errors["nombre"] = "El nombre es obligatorio"

        try:
            precio_value = int(precio.strip())
        except (ValueError, AttributeError):
            precio_value = None
        if precio_value is None or precio_value <= 0:
            errors["precio"] = "Ingrese un precio válido"

        if editing:
            try:
                stock_value = int((stock or "").strip())
            except ValueError:
                stock_value = None
            if stock_value is None or stock_value < 0:
                errors["stock"] = "Ingrese una cantidad válida"

        return errors
