# ==============================================================================
# CAPA DE SERVICIOS - Lógica de las pantallas
# ==============================================================================
# Cada pantalla tiene un servicio que es dueño de su estado explícito y lo
# modifica solo a través de operaciones con nombre.
#
# PRINCIPIOS:
# 1. Validar el formulario antes de cualquier llamada al almacén
# 2. Toda mutación exitosa termina con una relectura (sin parches locales)
# 3. Los errores del almacén se convierten en avisos, nunca son fatales
# 4. Las exportaciones trabajan sobre la lista ya cargada
#
# ESTRUCTURA:
# ├── platform.py          → Avisos, confirmaciones y hoja de compartir
# ├── export_service.py    → Excel (openpyxl), HTML (Jinja2), PDF (reportlab)
# ├── celofan_service.py   → Productos de celofán
# └── cuentas_service.py   → Cuentas por pagar y selector de gastos
# ==============================================================================

from app_negocio.services.platform import Alert, Notifier, SharedFile, ShareService
from app_negocio.services.export_service import (
    CELOFAN_LAYOUT,
    CUENTAS_LAYOUT,
    EmptyExportError,
    ExportError,
    ExportLayout,
    ExportService,
)
from app_negocio.services.celofan_service import CelofanService, CelofanState
from app_negocio.services.cuentas_service import CuentasService, CuentasState

__all__ = [
    'Alert',
    'Notifier',
    'SharedFile',
    'ShareService',
    'ExportService',
    'ExportLayout',
    'ExportError',
    'EmptyExportError',
    'CELOFAN_LAYOUT',
    'CUENTAS_LAYOUT',
    'CelofanService',
    'CelofanState',
    'CuentasService',
    'CuentasState',
]
