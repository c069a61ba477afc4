# ==============================================================================
# REPOSITORIO DE CUENTAS POR PAGAR
# ==============================================================================
# Encapsula el acceso a `cuentas_por_pagar`. Cada fila se lee junto con el
# concepto del gasto relacionado (expansión uno a uno `gastos(concepto)`).
# ==============================================================================

from typing import List

from app_negocio.models import Payable
from app_negocio.repositories.base import BaseRepository


class PayableRepository(BaseRepository):
    """
    Repositorio de la tabla `cuentas_por_pagar`.

    Columnas: id, fecha, proveedor, importe, estado, descripcion, gasto_id
    """

    table_name = 'cuentas_por_pagar'

    # Expansión del gasto relacionado para mostrar su concepto
    SELECT_WITH_GASTO = '*,gastos(concepto)'

    def list_all(self) -> List[Payable]:
        """
        Todas las cuentas, de la más reciente a la más antigua.

        Raises:
            StoreError: Si la lectura falla
        """
        query = (
            self.query()
            .select(self.SELECT_WITH_GASTO)
            .order('fecha', ascending=False)
        )
        return [Payable.from_dict(row) for row in self._run(query, 'fetching')]
