# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso al almacén remoto
# ==============================================================================
# Esta capa encapsula todo el acceso a las tablas del almacén alojado.
#
# ESTRUCTURA:
# ├── interfaces.py           → Protocolos (contratos del almacén y repos)
# ├── store_client.py         → Cliente PostgREST (constructor de consultas)
# ├── base.py                 → BaseRepository (insert/update/delete por id)
# ├── product_repository.py   → Tabla `productos`
# ├── payable_repository.py   → Tabla `cuentas_por_pagar`
# └── expense_repository.py   → Tabla `gastos` (solo lectura)
# ==============================================================================

from .interfaces import (
    IStoreClient,
    ITableQuery,
    IProductRepository,
    IPayableRepository,
    IExpenseRepository,
)

from .store_client import StoreClient, StoreError, StoreResponse, TableQuery
from .base import BaseRepository
from .product_repository import ProductRepository
from .payable_repository import PayableRepository
from .expense_repository import ExpenseRepository

__all__ = [
    # Interfaces
    'IStoreClient',
    'ITableQuery',
    'IProductRepository',
    'IPayableRepository',
    'IExpenseRepository',

    # Cliente
    'StoreClient',
    'StoreError',
    'StoreResponse',
    'TableQuery',

    # Implementaciones
    'BaseRepository',
    'ProductRepository',
    'PayableRepository',
    'ExpenseRepository',
]
