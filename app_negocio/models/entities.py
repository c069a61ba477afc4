# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa una fila de una tabla del almacén remoto.
# Los formularios son esquemas fijos: guardan el TEXTO que escribe el usuario
# y se validan en el borde, antes de cualquier llamada al almacén.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional


# ==============================================================================
# CONSTANTES Y ENUMERACIONES
# ==============================================================================

# Etiqueta de material que acota la tabla compartida `productos`
MATERIAL_CELOFAN = 'Celofán'


class EstadoCuenta(str, Enum):
    """Estados posibles de una cuenta por pagar."""
    PENDIENTE = 'Pendiente'
    PAGADO = 'Pagado'


ESTADOS_CUENTA = tuple(e.value for e in EstadoCuenta)


class ValidationError(Exception):
    """
    Violación de una regla de formulario detectada antes de tocar el almacén.

    Attributes:
        title: Título del aviso que se muestra al usuario
        message: Detalle de la violación
    """

    def __init__(self, title: str, message: str):
        super().__init__(message)
        self.title = title
        self.message = message


# ==============================================================================
# CONVERSIONES
# ==============================================================================

def to_text(value: Any) -> str:
    """
    Convierte un valor persistido a texto editable.

    Los flotantes enteros se escriben sin decimales (150.0 -> "150"),
    igual que se muestran en el formulario.
    """
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_number(raw: Any) -> Optional[float]:
    """
    Interpreta texto como número. Devuelve None si no es numérico.

    Acepta espacios alrededor; texto vacío no es un número.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    # NaN e infinitos no son importes válidos
    if number != number or number in (float('inf'), float('-inf')):
        return None
    return number


def _numeric_or_int(number: float) -> Any:
    """Devuelve int si el número no tiene parte decimal."""
    return int(number) if number.is_integer() else number


# ==============================================================================
# PRODUCTOS (tabla `productos`)
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    Attributes:
        id: Identificador asignado por el almacén
        nombre: Nombre del producto
        existencia: Cantidad en stock
        precio: Precio unitario
        unidad: Unidad de medida
        material: Etiqueta discriminadora (ej. "Celofán")
    """
    id: Optional[int]
    nombre: Optional[str]
    existencia: Optional[float]
    precio: Optional[float]
    unidad: Optional[str]
    material: Optional[str] = MATERIAL_CELOFAN

    def is_valid(self, material: str = MATERIAL_CELOFAN) -> bool:
        """Un producto se muestra solo si tiene todos los campos requeridos."""
        return (
            self.material == material
            and bool(self.nombre)
            and self.existencia is not None
            and self.precio is not None
            and bool(self.unidad)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde una fila del almacén."""
        return cls(
            id=data.get('id'),
            nombre=data.get('nombre'),
            existencia=data.get('existencia'),
            precio=data.get('precio'),
            unidad=data.get('unidad'),
            material=data.get('material'),
        )


@dataclass
class ProductoForm:
    """Estado del formulario de productos (todo texto)."""
    nombre: str = ''
    existencia: str = ''
    precio: str = ''
    unidad: str = ''
    material: str = MATERIAL_CELOFAN

    @classmethod
    def from_product(cls, product: Product) -> 'ProductoForm':
        """Copia un producto persistido al formulario, números como texto."""
        return cls(
            nombre=product.nombre or '',
            existencia=to_text(product.existencia),
            precio=to_text(product.precio),
            unidad=product.unidad or '',
            material=MATERIAL_CELOFAN,
        )

    def to_payload(self) -> Dict[str, Any]:
        """
        Valida el formulario y lo convierte en la fila a enviar.

        Raises:
            ValidationError: Si falta un campo o un número no es válido
        """
        nombre = self.nombre.strip()
        unidad = self.unidad.strip()
        if not nombre or not unidad or not self.existencia.strip() or not self.precio.strip():
            raise ValidationError(
                'Campos requeridos',
                'Nombre, existencia, precio y unidad son obligatorios.'
            )

        existencia = parse_number(self.existencia)
        if existencia is None or existencia < 0:
            raise ValidationError('Error', 'La existencia debe ser un número mayor o igual a 0.')

        precio = parse_number(self.precio)
        if precio is None or precio < 0:
            raise ValidationError('Error', 'El precio debe ser un número mayor o igual a 0.')

        return {
            'nombre': nombre,
            'existencia': _numeric_or_int(existencia),
            'precio': precio,
            'unidad': unidad,
            'material': self.material or MATERIAL_CELOFAN,
        }


# ==============================================================================
# GASTOS (tabla `gastos`, solo lectura)
# ==============================================================================

@dataclass
class Expense:
    """Gasto de referencia para el selector y la etiqueta de cada cuenta."""
    id: Any
    concepto: str
    fecha: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Expense':
        return cls(
            id=data.get('id'),
            concepto=data.get('concepto') or '',
            fecha=data.get('fecha'),
        )


# ==============================================================================
# CUENTAS POR PAGAR (tabla `cuentas_por_pagar`)
# ==============================================================================

@dataclass
class Payable:
    """
    Cuenta por pagar a un proveedor.

    Attributes:
        id: Identificador asignado por el almacén
        fecha: Fecha ISO (YYYY-MM-DD)
        proveedor: Nombre del proveedor
        importe: Monto adeudado (> 0)
        estado: "Pendiente" o "Pagado"
        descripcion: Texto libre opcional
        gasto_id: Referencia opcional a un gasto
        gasto_concepto: Concepto del gasto unido (solo lectura)
    """
    id: Optional[int]
    fecha: Optional[str]
    proveedor: Optional[str]
    importe: Optional[float]
    estado: Optional[str]
    descripcion: Optional[str] = None
    gasto_id: Any = None
    gasto_concepto: Optional[str] = None

    def is_valid(self) -> bool:
        """Una cuenta se muestra solo si tiene los campos obligatorios."""
        return (
            self.fecha is not None
            and self.proveedor is not None
            and self.importe is not None
            and self.estado is not None
        )

    def matches(self, busqueda: str) -> bool:
        """Coincidencia sin distinguir mayúsculas en proveedor O estado."""
        needle = (busqueda or '').lower()
        if not needle:
            return True
        return needle in (self.proveedor or '').lower() or needle in (self.estado or '').lower()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Payable':
        """Crea instancia desde una fila (incluye la expansión `gastos`)."""
        gasto = data.get('gastos') or {}
        return cls(
            id=data.get('id'),
            fecha=data.get('fecha'),
            proveedor=data.get('proveedor'),
            importe=data.get('importe'),
            estado=data.get('estado'),
            descripcion=data.get('descripcion'),
            gasto_id=data.get('gasto_id'),
            gasto_concepto=gasto.get('concepto') if isinstance(gasto, dict) else None,
        )


def _today() -> str:
    return date.today().isoformat()


@dataclass
class CuentaForm:
    """
    Estado del formulario de cuentas por pagar.

    `id` es None al crear; con valor, guardar actualiza esa fila.
    """
    id: Optional[int] = None
    fecha: str = field(default_factory=_today)
    proveedor: str = ''
    importe: str = '0'
    estado: str = EstadoCuenta.PENDIENTE.value
    descripcion: str = ''
    gasto_id: str = ''

    @classmethod
    def from_payable(cls, cuenta: Payable) -> 'CuentaForm':
        """Copia una cuenta persistida al formulario, números como texto."""
        return cls(
            id=cuenta.id,
            fecha=cuenta.fecha or '',
            proveedor=cuenta.proveedor or '',
            importe=to_text(cuenta.importe),
            estado=cuenta.estado or '',
            descripcion=cuenta.descripcion or '',
            gasto_id=to_text(cuenta.gasto_id),
        )

    def to_payload(self) -> Dict[str, Any]:
        """
        Valida el formulario y arma la fila a enviar.

        - proveedor se recorta
        - importe se convierte a número
        - descripcion y gasto_id vacíos pasan a None

        Raises:
            ValidationError: Si falta un campo obligatorio o el importe no es > 0
        """
        fecha = (self.fecha or '').strip()
        proveedor = (self.proveedor or '').strip()
        estado = (self.estado or '').strip()

        if not fecha or not proveedor or not estado:
            raise ValidationError('Campos requeridos', 'Fecha, proveedor y estado son obligatorios.')

        if estado not in ESTADOS_CUENTA:
            raise ValidationError('Error', f"Estado inválido: {estado}.")

        importe = parse_number(self.importe)
        if importe is None or importe <= 0:
            raise ValidationError('Error', 'El importe debe ser un número mayor a 0.')

        gasto_raw = (self.gasto_id or '').strip()
        gasto_id: Any = None
        if gasto_raw:
            gasto_id = int(gasto_raw) if gasto_raw.isdecimal() else gasto_raw

        return {
            'fecha': fecha,
            'proveedor': proveedor,
            'importe': importe,
            'estado': estado,
            'descripcion': (self.descripcion or '').strip() or None,
            'gasto_id': gasto_id,
        }
