# ==============================================================================
# REPOSITORIO DE GASTOS (solo lectura)
# ==============================================================================

from typing import List

from app_negocio.models import Expense
from app_negocio.repositories.base import BaseRepository


class ExpenseRepository(BaseRepository):
    """Lectura de `gastos` para poblar el selector de cuentas por pagar."""

    table_name = 'gastos'

    def list_options(self) -> List[Expense]:
        """Gastos (id, concepto), del más reciente al más antiguo."""
        query = (
            self.query()
            .select('id,concepto')
            .order('fecha', ascending=False)
        )
        return [Expense.from_dict(row) for row in self._run(query, 'fetching')]
