# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================
# Encapsula el acceso a la tabla compartida `productos`.
# La columna `material` acota la tabla a un subtipo (ej. "Celofán").
# ==============================================================================

from typing import List

from app_negocio.models import Product
from app_negocio.repositories.base import BaseRepository


class ProductRepository(BaseRepository):
    """
    Repositorio de la tabla `productos`.

    Columnas: id, nombre, existencia, precio, unidad, material
    """

    table_name = 'productos'

    def list_by_material(self, material: str) -> List[Product]:
        """
        Productos de un material, ordenados por nombre ascendente.

        Args:
            material: Valor exacto de la etiqueta de material

        Raises:
            StoreError: Si la lectura falla
        """
        query = (
            self.query()
            .select('*')
            .eq('material', material)
            .order('nombre', ascending=True)
        )
        return [Product.from_dict(row) for row in self._run(query, 'fetching')]
