# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del almacén remoto (productos, cuentas por pagar, gastos) y los
# formularios de cada pantalla, definidos con dataclasses.
# ==============================================================================

from .entities import (
    # Productos
    MATERIAL_CELOFAN,
    Product,
    ProductoForm,

    # Cuentas por pagar
    EstadoCuenta,
    ESTADOS_CUENTA,
    Payable,
    CuentaForm,

    # Gastos
    Expense,

    # Utilidades
    ValidationError,
    parse_number,
    to_text,
)

__all__ = [
    'MATERIAL_CELOFAN',
    'Product',
    'ProductoForm',
    'EstadoCuenta',
    'ESTADOS_CUENTA',
    'Payable',
    'CuentaForm',
    'Expense',
    'ValidationError',
    'parse_number',
    'to_text',
]
