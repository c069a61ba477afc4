# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos que cumplen los repositorios y el cliente del almacén. Permiten:
#
# 1. INDEPENDENCIA DEL ALMACÉN
#    - Los servicios dependen de estos protocolos, no de PostgREST
#
# 2. TESTING
#    - Un almacén en memoria que implemente IStoreClient basta para probar
#      servicios y rutas sin red
#
# ==============================================================================

from typing import Any, Dict, List, Protocol, runtime_checkable

from app_negocio.models import Expense, Payable, Product


# ==============================================================================
# CLIENTE DEL ALMACÉN
# ==============================================================================

@runtime_checkable
class ITableQuery(Protocol):
    """Consulta encadenable sobre una tabla."""

    def select(self, columns: str = '*') -> 'ITableQuery':
        ...

    def insert(self, rows: Any) -> 'ITableQuery':
        ...

    def update(self, values: Dict[str, Any]) -> 'ITableQuery':
        ...

    def delete(self) -> 'ITableQuery':
        ...

    def eq(self, column: str, value: Any) -> 'ITableQuery':
        ...

    def order(self, column: str, ascending: bool = True) -> 'ITableQuery':
        ...

    def execute(self) -> Any:
        """Envía la consulta; el resultado expone `.data` (lista de filas)."""
        ...


@runtime_checkable
class IStoreClient(Protocol):
    """Conexión única al almacén remoto."""

    def table(self, name: str) -> ITableQuery:
        ...


# ==============================================================================
# INTERFACES ESPECÍFICAS POR DOMINIO
# ==============================================================================

@runtime_checkable
class IProductRepository(Protocol):
    """Acceso a la tabla `productos` acotada por material."""

    def list_by_material(self, material: str) -> List[Product]:
        """Productos de un material, ordenados por nombre ascendente."""
        ...

    def create(self, data: Dict[str, Any]) -> None:
        ...

    def update(self, product_id: Any, data: Dict[str, Any]) -> None:
        ...

    def delete(self, product_id: Any) -> None:
        ...


@runtime_checkable
class IPayableRepository(Protocol):
    """Acceso a la tabla `cuentas_por_pagar` (con el concepto del gasto unido)."""

    def list_all(self) -> List[Payable]:
        """Cuentas ordenadas por fecha descendente."""
        ...

    def create(self, data: Dict[str, Any]) -> None:
        ...

    def update(self, payable_id: Any, data: Dict[str, Any]) -> None:
        ...

    def delete(self, payable_id: Any) -> None:
        ...


@runtime_checkable
class IExpenseRepository(Protocol):
    """Lectura de la tabla de referencia `gastos`."""

    def list_options(self) -> List[Expense]:
        """Gastos (id, concepto) ordenados por fecha descendente."""
        ...
