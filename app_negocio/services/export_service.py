# ==============================================================================
# SERVICIO DE EXPORTACIÓN - Excel y PDF
# ==============================================================================
# Transformaciones sin estado sobre la lista filtrada que la pantalla ya tiene
# en memoria. Nunca consulta ni modifica el almacén.
#
#   registros → filas con columnas rotuladas → .xlsx  (openpyxl)
#                                            → HTML   (Jinja2)
#                                            → PDF    (reportlab)
#
# El archivo se escribe en el directorio de caché y se entrega al
# ShareService.
# ==============================================================================

import io
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple
from xml.sax.saxutils import escape

from jinja2 import Environment, FileSystemLoader, select_autoescape
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import IllegalCharacterError
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.doctemplate import LayoutError

from app_negocio.performance_logger import profile_function
from app_negocio.services.platform import ShareService, SharedFile

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'templates')

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
PDF_MIMETYPE = 'application/pdf'

# Valor mostrado cuando un campo opcional está vacío
EMPTY_CELL = '-'


class ExportError(Exception):
    """Fallo de exportación; `title`/`message` van tal cual al aviso."""

    def __init__(self, title: str, message: str):
        super().__init__(message)
        self.title = title
        self.message = message


class EmptyExportError(ExportError):
    """La lista filtrada está vacía: no se genera ningún archivo."""


# ==============================================================================
# DISEÑOS DE EXPORTACIÓN
# ==============================================================================

@dataclass(frozen=True)
class ExportLayout:
    """
    Columnas y textos de una exportación.

    Attributes:
        title: Encabezado del documento
        sheet_name: Nombre de la hoja del libro
        filename: Nombre base del archivo (sin extensión)
        columns: Pares (rótulo, función que extrae el valor)
        total_label: Prefijo de la línea final con el conteo
        empty_message: Aviso cuando no hay registros
    """
    title: str
    sheet_name: str
    filename: str
    columns: Tuple[Tuple[str, Callable[[Any], Any]], ...]
    total_label: str
    empty_message: str

    @property
    def headers(self) -> List[str]:
        return [header for header, _ in self.columns]


def _or_dash(value: Any) -> Any:
    return value if value not in (None, '') else EMPTY_CELL


def _sheet_value(value: Any) -> Any:
    """Quita los caracteres de control que openpyxl no acepta en una celda."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub('', value)
    return value


CUENTAS_LAYOUT = ExportLayout(
    title='Cuentas por Pagar',
    sheet_name='CuentasPorPagar',
    filename='cuentas_por_pagar',
    columns=(
        ('Fecha', lambda c: c.fecha),
        ('Proveedor', lambda c: c.proveedor),
        ('Importe', lambda c: c.importe),
        ('Estado', lambda c: c.estado),
        ('Descripción', lambda c: _or_dash(c.descripcion)),
        ('Gasto', lambda c: _or_dash(c.gasto_concepto)),
    ),
    total_label='Total de cuentas',
    empty_message='No hay cuentas por pagar para exportar.',
)

CELOFAN_LAYOUT = ExportLayout(
    title='Productos de Celofán',
    sheet_name='Celofan',
    filename='celofan',
    columns=(
        ('Nombre', lambda p: p.nombre),
        ('Existencia', lambda p: p.existencia),
        ('Precio', lambda p: p.precio),
        ('Unidad', lambda p: p.unidad),
    ),
    total_label='Total de productos',
    empty_message='No hay productos para exportar.',
)


# ==============================================================================
# SERVICIO
# ==============================================================================

class ExportService:
    """
    Genera y comparte exportaciones de la lista en memoria.

    Args:
        share_service: Destino de los archivos generados
        cache_dir: Directorio donde se escriben los archivos
    """

    def __init__(self, share_service: ShareService, cache_dir: str):
        self.share_service = share_service
        self.cache_dir = cache_dir
        self._jinja = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=select_autoescape(['html']),
        )

    # =========================================================================
    # TRANSFORMACIONES PURAS
    # =========================================================================

    def build_rows(self, layout: ExportLayout, records: Sequence[Any]) -> List[Dict[str, Any]]:
        """Cada registro como fila plana {rótulo: valor}."""
        return [
            {header: getter(record) for header, getter in layout.columns}
            for record in records
        ]

    def to_xlsx(self, layout: ExportLayout, records: Sequence[Any]) -> bytes:
        """Libro con una hoja nombrada por la entidad y una fila por registro."""
        wb = Workbook()
        ws = wb.active
        ws.title = layout.sheet_name

        ws.append(layout.headers)
        header_fill = PatternFill('solid', fgColor='F2F2F2')
        for cell in ws[1]:
            cell.font = Font(bold=True)
            cell.fill = header_fill

        widths = [len(h) for h in layout.headers]
        for row in self.build_rows(layout, records):
            values = [_sheet_value(row[h]) for h in layout.headers]
            ws.append(values)
            for idx, value in enumerate(values):
                widths[idx] = max(widths[idx], len(str(value)))

        for idx, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, 60)

        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    def to_html(self, layout: ExportLayout, records: Sequence[Any]) -> str:
        """Documento imprimible: tabla con las mismas columnas y el conteo final."""
        template = self._jinja.get_template('exports/reporte.html')
        return template.render(
            title=layout.title,
            headers=layout.headers,
            rows=self.build_rows(layout, records),
            total_label=layout.total_label,
            total=len(records),
        )

    def to_pdf(self, layout: ExportLayout, records: Sequence[Any]) -> bytes:
        """Versión paginada del documento imprimible."""
        buffer = io.BytesIO()
        wide = len(layout.columns) > 4
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4) if wide else A4,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=layout.title,
        )
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle('ReportTitle', parent=styles['Heading1'], alignment=TA_CENTER,
                                     textColor=colors.HexColor('#333333'))
        cell_style = ParagraphStyle('Cell', parent=styles['BodyText'], fontSize=9, leading=11)
        header_style = ParagraphStyle('HeaderCell', parent=cell_style, fontName='Helvetica-Bold')
        total_style = ParagraphStyle('Total', parent=styles['BodyText'], fontName='Helvetica-Bold')

        data = [[Paragraph(escape(h), header_style) for h in layout.headers]]
        for row in self.build_rows(layout, records):
            data.append([Paragraph(escape(str(row[h])), cell_style) for h in layout.headers])

        # Una celda más alta que la página se parte entre páginas
        table = Table(data, repeatRows=1, splitInRow=1)
        table.setStyle(TableStyle([
            ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#dddddd')),
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f2f2f2')),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('TOPPADDING', (0, 0), (-1, -1), 4),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ]))

        story = [
            Paragraph(escape(layout.title), title_style),
            Spacer(1, 6 * mm),
            table,
            Spacer(1, 6 * mm),
            Paragraph(escape(f'{layout.total_label}: {len(records)}'), total_style),
        ]
        doc.build(story)
        return buffer.getvalue()

    # =========================================================================
    # EXPORTAR Y COMPARTIR
    # =========================================================================

    def _ensure_not_empty(self, layout: ExportLayout, records: Sequence[Any]) -> None:
        if not records:
            raise EmptyExportError('Sin datos', layout.empty_message)

    def _write_cache_file(self, name: str, content: bytes) -> str:
        """
        Escribe en un archivo propio de esta exportación.

        Cada llamada usa una ruta distinta, así dos exportaciones simultáneas
        no se pisan. El nombre de descarga sigue siendo `name`.
        """
        os.makedirs(self.cache_dir, exist_ok=True)
        base, ext = os.path.splitext(name)
        fd, path = tempfile.mkstemp(prefix=f'{base}_', suffix=ext, dir=self.cache_dir)
        with os.fdopen(fd, 'wb') as f:
            f.write(content)
        return path

    @profile_function(name="Exportar Excel")
    def export_excel(self, layout: ExportLayout, records: Sequence[Any]) -> SharedFile:
        """
        Genera el .xlsx, lo escribe en caché y lo comparte.

        Raises:
            EmptyExportError: Si no hay registros (no se escribe nada)
            ExportError: Si falla la generación o la escritura
        """
        self._ensure_not_empty(layout, records)
        filename = f'{layout.filename}.xlsx'
        try:
            path = self._write_cache_file(filename, self.to_xlsx(layout, records))
        except (OSError, ValueError, IllegalCharacterError) as exc:
            logger.error("Error exportando Excel: %s", exc)
            raise ExportError('Error', 'No se pudo exportar el archivo Excel.') from exc
        return self.share_service.share(path, XLSX_MIMETYPE, filename)

    @profile_function(name="Exportar PDF")
    def export_pdf(self, layout: ExportLayout, records: Sequence[Any]) -> SharedFile:
        """
        Genera el PDF, lo escribe en caché y lo comparte.

        Raises:
            EmptyExportError: Si no hay registros (no se escribe nada)
            ExportError: Si falla la generación o la escritura
        """
        self._ensure_not_empty(layout, records)
        filename = f'{layout.filename}.pdf'
        try:
            path = self._write_cache_file(filename, self.to_pdf(layout, records))
        except (OSError, ValueError, LayoutError) as exc:
            logger.error("Error exportando PDF: %s", exc)
            raise ExportError('Error', 'No se pudo exportar el archivo PDF.') from exc
        return self.share_service.share(path, PDF_MIMETYPE, filename)


__all__ = [
    'ExportService',
    'ExportLayout',
    'ExportError',
    'EmptyExportError',
    'CUENTAS_LAYOUT',
    'CELOFAN_LAYOUT',
]
