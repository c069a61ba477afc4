# ==============================================================================
# SERVICIO DE CUENTAS POR PAGAR
# ==============================================================================
# Estado de la pantalla de cuentas por pagar:
#   - Lista de cuentas (con el concepto del gasto unido)
#   - Gastos para el selector (solo lectura)
#   - Búsqueda, formulario y banderas de carga
#
# Toda escritura se valida antes de llamar al almacén y, si tiene éxito,
# termina con una sola relectura de las cuentas.
# ==============================================================================

import logging
from dataclasses import dataclass, field, fields
from typing import List, Optional

from app_negocio.models import CuentaForm, Expense, Payable, ValidationError
from app_negocio.performance_logger import profile_function
from app_negocio.repositories import IExpenseRepository, IPayableRepository, StoreError
from app_negocio.services.export_service import (
    CUENTAS_LAYOUT,
    EmptyExportError,
    ExportError,
    ExportService,
)
from app_negocio.services.platform import Notifier, SharedFile

logger = logging.getLogger(__name__)

_FORM_FIELDS = frozenset(f.name for f in fields(CuentaForm)) - {'id'}


@dataclass
class CuentasState:
    """
    Estado de la pantalla.

    Attributes:
        cuentas: Última lectura exitosa (sin filtrar)
        gastos: Opciones del selector de gasto
        busqueda: Texto de búsqueda
        mostrar_formulario: Visibilidad del formulario
        cargando: Lectura/escritura en curso
        cargando_exportar: Exportación en curso
        form: Valores del formulario como texto
    """
    cuentas: List[Payable] = field(default_factory=list)
    gastos: List[Expense] = field(default_factory=list)
    busqueda: str = ''
    mostrar_formulario: bool = False
    cargando: bool = False
    cargando_exportar: bool = False
    form: CuentaForm = field(default_factory=CuentaForm)


class CuentasService:
    """
    Libro de cuentas por pagar.

    Responsabilidades:
    - Cargar cuentas y gastos al montar la pantalla
    - Filtrar por proveedor o estado
    - Crear, editar y eliminar (con confirmación)
    - Exportar la lista filtrada a Excel o PDF
    """

    def __init__(
        self,
        payable_repo: IPayableRepository,
        expense_repo: IExpenseRepository,
        notifier: Notifier,
        export_service: ExportService = None
    ):
        """
        Args:
            payable_repo: Repositorio de cuentas por pagar
            expense_repo: Repositorio de gastos (solo lectura)
            notifier: Destino de avisos y confirmaciones
            export_service: Servicio de exportación (opcional)
        """
        self.payable_repo = payable_repo
        self.expense_repo = expense_repo
        self.notifier = notifier
        self.export_service = export_service
        self.state = CuentasState()

    # =========================================================================
    # LECTURA
    # =========================================================================

    def mount(self) -> None:
        """Carga inicial de la pantalla."""
        self.fetch_cuentas()
        self.fetch_gastos()

    @profile_function(name="Cargar cuentas por pagar")
    def fetch_cuentas(self) -> bool:
        """
        Relee todas las cuentas, más recientes primero.

        Si falla se avisa y se conserva la lista anterior.
        """
        self.state.cargando = True
        try:
            self.state.cuentas = self.payable_repo.list_all()
            return True
        except StoreError as exc:
            logger.error("Error al cargar cuentas por pagar: %s", exc.message)
            self.notifier.error('Error', 'No se pudieron cargar las cuentas por pagar')
            return False
        finally:
            self.state.cargando = False

    def fetch_gastos(self) -> bool:
        """Relee los gastos del selector. Un fallo solo se registra."""
        try:
            self.state.gastos = self.expense_repo.list_options()
            return True
        except StoreError as exc:
            logger.error("Error al cargar gastos: %s", exc.message)
            return False

    @property
    def cuentas(self) -> List[Payable]:
        """Cuentas con todos los campos obligatorios."""
        return [c for c in self.state.cuentas if c.is_valid()]

    @property
    def cuentas_filtradas(self) -> List[Payable]:
        """Cuentas válidas cuyo proveedor o estado contiene la búsqueda."""
        busqueda = self.state.busqueda
        return [c for c in self.cuentas if c.matches(busqueda)]

    @property
    def empty_message(self) -> str:
        if self.state.busqueda:
            return 'No se encontraron cuentas con esa búsqueda'
        return 'No hay cuentas por pagar registradas'

    def find(self, cuenta_id: int) -> Optional[Payable]:
        for cuenta in self.cuentas:
            if cuenta.id == cuenta_id:
                return cuenta
        return None

    # =========================================================================
    # BÚSQUEDA Y FORMULARIO
    # =========================================================================

    def set_busqueda(self, texto: str) -> None:
        self.state.busqueda = texto or ''

    def handle_change(self, name: str, value: str) -> None:
        """Actualiza un campo del formulario."""
        if name not in _FORM_FIELDS:
            raise ValueError(f"Campo desconocido: {name}")
        setattr(self.state.form, name, value)

    def open_form(self) -> None:
        """Muestra el formulario vacío para una cuenta nueva."""
        self.state.form = CuentaForm()
        self.state.mostrar_formulario = True

    def reset_form(self) -> None:
        """Valores por defecto y formulario oculto."""
        self.state.form = CuentaForm()
        self.state.mostrar_formulario = False

    def begin_edit(self, cuenta: Payable) -> None:
        """Carga una cuenta persistida en el formulario (números como texto)."""
        self.state.form = CuentaForm.from_payable(cuenta)
        self.state.mostrar_formulario = True

    @property
    def editing_id(self) -> Optional[int]:
        return self.state.form.id

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def _validated_payload(self) -> Optional[dict]:
        try:
            return self.state.form.to_payload()
        except ValidationError as exc:
            self.notifier.error(exc.title, exc.message)
            return None

    def create(self) -> bool:
        """Inserta el formulario como cuenta nueva."""
        payload = self._validated_payload()
        if payload is None:
            return False
        return self._write(
            lambda: self.payable_repo.create(payload),
            'Cuenta creada correctamente'
        )

    def update(self) -> bool:
        """Actualiza la cuenta cuyo id está en el formulario."""
        cuenta_id = self.state.form.id
        if cuenta_id is None:
            return False
        payload = self._validated_payload()
        if payload is None:
            return False
        return self._write(
            lambda: self.payable_repo.update(cuenta_id, payload),
            'Cuenta actualizada correctamente'
        )

    def save(self) -> bool:
        """Actualiza si el formulario tiene id, si no crea."""
        if self.state.form.id is not None:
            return self.update()
        return self.create()

    def _write(self, operation, success_message: str) -> bool:
        self.state.cargando = True
        try:
            operation()
        except StoreError as exc:
            logger.error("Error al guardar cuenta por pagar: %s", exc.message)
            self.notifier.error('Error', 'No se pudo guardar la cuenta por pagar.')
            return False
        finally:
            self.state.cargando = False

        self.notifier.success('Éxito', success_message)
        self.reset_form()
        self.fetch_cuentas()
        return True

    def request_delete(self, cuenta_id: int) -> bool:
        """Pide confirmación y elimina."""
        confirmed = self.notifier.confirm(
            'Confirmar eliminación',
            '¿Estás seguro de que deseas eliminar esta cuenta por pagar? '
            'Esto puede afectar reportes financieros.'
        )
        if not confirmed:
            return False
        return self.delete(cuenta_id)

    def delete(self, cuenta_id: int) -> bool:
        """Elimina por id y relee. El formulario no se toca."""
        self.state.cargando = True
        try:
            self.payable_repo.delete(cuenta_id)
        except StoreError as exc:
            logger.error("Error al eliminar cuenta por pagar: %s", exc.message)
            self.notifier.error('Error', 'No se pudo eliminar la cuenta.')
            return False
        finally:
            self.state.cargando = False

        self.notifier.success('Éxito', 'Cuenta eliminada correctamente')
        self.fetch_cuentas()
        return True

    # =========================================================================
    # EXPORTACIÓN
    # =========================================================================

    def export_excel(self) -> Optional[SharedFile]:
        return self._export(self.export_service.export_excel)

    def export_pdf(self) -> Optional[SharedFile]:
        return self._export(self.export_service.export_pdf)

    def export_html(self) -> Optional[str]:
        """Documento imprimible de la lista filtrada, o None si está vacía."""
        cuentas = self.cuentas_filtradas
        if not cuentas:
            self.notifier.alert('Sin datos', CUENTAS_LAYOUT.empty_message, 'warning')
            return None
        return self.export_service.to_html(CUENTAS_LAYOUT, cuentas)

    def _export(self, exporter) -> Optional[SharedFile]:
        self.state.cargando_exportar = True
        try:
            return exporter(CUENTAS_LAYOUT, self.cuentas_filtradas)
        except EmptyExportError as exc:
            self.notifier.alert(exc.title, exc.message, 'warning')
            return None
        except ExportError as exc:
            self.notifier.error(exc.title, exc.message)
            return None
        finally:
            self.state.cargando_exportar = False
