# ==============================================================================
# REPOSITORIO BASE - Funcionalidad común para tablas del almacén remoto
# ==============================================================================

import logging
from typing import Any, Dict, List

from app_negocio.repositories.interfaces import IStoreClient, ITableQuery
from app_negocio.repositories.store_client import StoreError

logger = logging.getLogger(__name__)


class BaseRepository:
    """
    Clase base para los repositorios de una tabla.

    No guarda caché: cada lectura va al almacén, que es la fuente de verdad.
    Los fallos se registran y se relanzan como StoreError para que el
    servicio decida qué aviso mostrar.
    """

    table_name: str = ''

    def __init__(self, client: IStoreClient):
        """
        Args:
            client: Conexión compartida al almacén
        """
        self.client = client

    def query(self) -> ITableQuery:
        """Nueva consulta sobre la tabla del repositorio."""
        return self.client.table(self.table_name)

    def _run(self, query: ITableQuery, action: str) -> List[Dict[str, Any]]:
        """
        Ejecuta una consulta y devuelve las filas.

        Args:
            query: Consulta ya armada
            action: Descripción corta para el log (ej. 'fetching')

        Raises:
            StoreError: Si la consulta falla
        """
        try:
            response = query.execute()
        except StoreError as exc:
            logger.error("Error %s %s: %s", action, self.table_name, exc.message)
            raise
        return list(getattr(response, 'data', None) or [])

    # -------------------------------------------------------------------------
    # Operaciones genéricas por id
    # -------------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> None:
        """Inserta una fila nueva."""
        self._run(self.query().insert([data]), 'inserting')

    def update(self, record_id: Any, data: Dict[str, Any]) -> None:
        """Actualización parcial de la fila con ese id."""
        self._run(self.query().update(data).eq('id', record_id), 'updating')

    def delete(self, record_id: Any) -> None:
        """Elimina la fila con ese id."""
        self._run(self.query().delete().eq('id', record_id), 'deleting')
