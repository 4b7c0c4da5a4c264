from .product import Product, ProductRequest, ProductResponse, ProductosListResponse, ProductForm
from .stock import StockItem, StockListResponse, StockUpdateRequest
from .store import Local, LocalesResponse
from .category import Category, CategoryRequest, CategoriesResponse, CategoryResponse
from .sale import Sale, VentasListResponse
from .auth import LoginRequest, LoginResponse, User, PermissionResponse, AuthSession
from .chat import ChatRequest, ChatResponse, ChatAction
from .indicator import IndicatorResponse, IndicatorValue
from .dashboard import IndicatorState, SalesMetricsState, InventoryMetricsState
