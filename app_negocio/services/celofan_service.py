# ==============================================================================
# SERVICIO DE PRODUCTOS DE CELOFÁN
# ==============================================================================
# Estado de la pantalla de celofán y sus operaciones. Cada mutación exitosa
# termina con una relectura completa del almacén (no hay parches locales).
#
#   fetch → lista    create/update → fetch + reset_form    delete → fetch
# ==============================================================================

from dataclasses import dataclass, field, fields
from typing import List, Optional

from app_negocio.models import MATERIAL_CELOFAN, Product, ProductoForm, ValidationError
from app_negocio.performance_logger import profile_function
from app_negocio.repositories import IProductRepository, StoreError
from app_negocio.services.export_service import (
    CELOFAN_LAYOUT,
    EmptyExportError,
    ExportError,
    ExportService,
)
from app_negocio.services.platform import Notifier, SharedFile

_FORM_FIELDS = frozenset(f.name for f in fields(ProductoForm))


@dataclass
class CelofanState:
    """
    Estado de la pantalla.

    Attributes:
        productos: Última lectura exitosa (sin filtrar)
        form: Valores del formulario como texto
        editing_id: Producto en edición, None al crear
        loading: True mientras hay una lectura en curso (y antes de la primera)
        exporting: True mientras se genera una exportación
    """
    productos: List[Product] = field(default_factory=list)
    form: ProductoForm = field(default_factory=ProductoForm)
    editing_id: Optional[int] = None
    loading: bool = True
    exporting: bool = False


class CelofanService:
    """
    Acceso a los productos de un material.

    Responsabilidades:
    - Leer productos del material, ordenados por nombre
    - Crear, editar y eliminar con relectura posterior
    - Validar el formulario antes de escribir
    - Exportar la lista visible
    """

    def __init__(
        self,
        product_repo: IProductRepository,
        notifier: Notifier,
        export_service: ExportService = None,
        material: str = MATERIAL_CELOFAN
    ):
        """
        Args:
            product_repo: Repositorio de productos
            notifier: Destino de avisos y confirmaciones
            export_service: Servicio de exportación (opcional)
            material: Etiqueta de material que acota la tabla
        """
        self.product_repo = product_repo
        self.notifier = notifier
        self.export_service = export_service
        self.material = material
        self.state = CelofanState(form=ProductoForm(material=material))

    # =========================================================================
    # LECTURA
    # =========================================================================

    @property
    def productos(self) -> List[Product]:
        """Productos visibles: solo los que tienen todos los campos requeridos."""
        return [p for p in self.state.productos if p.is_valid(self.material)]

    @profile_function(name="Cargar productos de celofán")
    def fetch(self) -> bool:
        """
        Relee los productos del material.

        Si falla se avisa y se conserva la lista anterior.
        """
        self.state.loading = True
        try:
            self.state.productos = self.product_repo.list_by_material(self.material)
            return True
        except StoreError as exc:
            self.notifier.error('Error al obtener productos', exc.message)
            return False
        finally:
            self.state.loading = False

    # =========================================================================
    # FORMULARIO
    # =========================================================================

    def handle_change(self, name: str, value: str) -> None:
        """Actualiza un campo del formulario."""
        if name not in _FORM_FIELDS:
            raise ValueError(f"Campo desconocido: {name}")
        setattr(self.state.form, name, value)

    def reset_form(self) -> None:
        self.state.form = ProductoForm(material=self.material)

    def begin_edit(self, product: Product) -> None:
        """Carga un producto persistido en el formulario y recuerda su id."""
        self.state.form = ProductoForm.from_product(product)
        self.state.form.material = self.material
        self.state.editing_id = product.id

    def find(self, product_id: int) -> Optional[Product]:
        """Busca en la lista visible."""
        for product in self.productos:
            if product.id == product_id:
                return product
        return None

    def _validated_payload(self) -> Optional[dict]:
        try:
            return self.state.form.to_payload()
        except ValidationError as exc:
            self.notifier.error(exc.title, exc.message)
            return None

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def create(self) -> bool:
        """
        Inserta el formulario como producto nuevo.

        Returns:
            True si se guardó; el formulario se conserva si falla
        """
        payload = self._validated_payload()
        if payload is None:
            return False

        try:
            self.product_repo.create(payload)
        except StoreError as exc:
            self.notifier.error('Error al agregar producto', exc.message)
            return False

        self.fetch()
        self.reset_form()
        return True

    def update(self) -> bool:
        """Actualiza el producto en edición con los valores del formulario."""
        if self.state.editing_id is None:
            return False

        payload = self._validated_payload()
        if payload is None:
            return False

        try:
            self.product_repo.update(self.state.editing_id, payload)
        except StoreError as exc:
            self.notifier.error('Error al actualizar producto', exc.message)
            return False

        self.fetch()
        self.reset_form()
        self.state.editing_id = None
        return True

    def save(self) -> bool:
        """Actualiza si hay un producto en edición, si no crea uno nuevo."""
        if self.state.editing_id is not None:
            return self.update()
        return self.create()

    def request_delete(self, product_id: int) -> bool:
        """Pide confirmación y elimina."""
        confirmed = self.notifier.confirm(
            'Confirmar eliminación',
            '¿Estás seguro de que deseas eliminar este producto?'
        )
        if not confirmed:
            return False
        return self.delete(product_id)

    def delete(self, product_id: int) -> bool:
        """Elimina por id y relee. El formulario no se toca."""
        try:
            self.product_repo.delete(product_id)
        except StoreError as exc:
            self.notifier.error('Error al eliminar producto', exc.message)
            return False

        self.fetch()
        return True

    # =========================================================================
    # EXPORTACIÓN
    # =========================================================================

    def export_excel(self) -> Optional[SharedFile]:
        return self._export(self.export_service.export_excel)

    def export_pdf(self) -> Optional[SharedFile]:
        return self._export(self.export_service.export_pdf)

    def _export(self, exporter) -> Optional[SharedFile]:
        self.state.exporting = True
        try:
            return exporter(CELOFAN_LAYOUT, self.productos)
        except EmptyExportError as exc:
            self.notifier.alert(exc.title, exc.message, 'warning')
            return None
        except ExportError as exc:
            self.notifier.error(exc.title, exc.message)
            return None
        finally:
            self.state.exporting = False
