import io
import os

import pytest
from openpyxl import load_workbook
from openpyxl.utils.exceptions import IllegalCharacterError
from reportlab.platypus.doctemplate import LayoutError

from app_negocio.models import Payable, Product
from app_negocio.services import (
    CELOFAN_LAYOUT,
    CUENTAS_LAYOUT,
    EmptyExportError,
    ExportError,
    ExportService,
    ShareService,
)


@pytest.fixture
def cuentas():
    return [
        Payable(id=1, fecha='2024-01-15', proveedor='ACME', importe=150.5, estado='Pendiente'),
        Payable(id=2, fecha='2024-01-20', proveedor='<Papelera & Co>', importe=20, estado='Pagado',
                descripcion='Cajas', gasto_id=3, gasto_concepto='Empaque'),
    ]


def test_rows_use_dash_for_missing_optionals(export_service, cuentas):
    rows = export_service.build_rows(CUENTAS_LAYOUT, cuentas)

    assert rows[0] == {
        'Fecha': '2024-01-15',
        'Proveedor': 'ACME',
        'Importe': 150.5,
        'Estado': 'Pendiente',
        'Descripción': '-',
        'Gasto': '-',
    }
    assert rows[1]['Gasto'] == 'Empaque'


def test_xlsx_has_named_sheet_and_header_row(export_service, cuentas):
    content = export_service.to_xlsx(CUENTAS_LAYOUT, cuentas)

    ws = load_workbook(io.BytesIO(content)).active
    assert ws.title == 'CuentasPorPagar'
    assert [c.value for c in ws[1]] == CUENTAS_LAYOUT.headers
    assert ws.max_row == 3
    assert ws['C2'].value == 150.5
    assert ws['A1'].font.bold


def test_product_xlsx_columns(export_service):
    productos = [Product(id=1, nombre='Rollo', existencia=4, precio=10.0, unidad='rollo')]

    ws = load_workbook(io.BytesIO(export_service.to_xlsx(CELOFAN_LAYOUT, productos))).active

    assert ws.title == 'Celofan'
    assert list(ws.iter_rows(values_only=True)) == [
        ('Nombre', 'Existencia', 'Precio', 'Unidad'),
        ('Rollo', 4, 10, 'rollo'),
    ]


def test_html_escapes_values_and_counts_rows(export_service, cuentas):
    html = export_service.to_html(CUENTAS_LAYOUT, cuentas)

    assert '<h1>Cuentas por Pagar</h1>' in html
    assert '&lt;Papelera &amp; Co&gt;' in html
    assert '<Papelera' not in html
    assert 'Total de cuentas: 2' in html
    assert html.count('<th>') == 6


def test_pdf_is_a_pdf(export_service, cuentas):
    assert export_service.to_pdf(CUENTAS_LAYOUT, cuentas).startswith(b'%PDF')


def test_export_excel_writes_cache_file_and_shares(tmp_path, cuentas):
    share = ShareService()
    service = ExportService(share, str(tmp_path / 'cache'))

    shared = service.export_excel(CUENTAS_LAYOUT, cuentas)

    assert os.path.dirname(shared.path) == str(tmp_path / 'cache')
    assert shared.path.endswith('.xlsx')
    assert os.path.exists(shared.path)
    assert shared.filename == 'cuentas_por_pagar.xlsx'
    assert shared.mimetype == 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    assert share.last is shared


def test_each_export_gets_its_own_file(tmp_path, cuentas):
    service = ExportService(ShareService(), str(tmp_path / 'cache'))

    primero = service.export_excel(CUENTAS_LAYOUT, cuentas)
    segundo = service.export_excel(CUENTAS_LAYOUT, cuentas[:1])

    assert primero.path != segundo.path
    assert primero.filename == segundo.filename == 'cuentas_por_pagar.xlsx'
    assert load_workbook(primero.path).active.max_row == 3
    assert load_workbook(segundo.path).active.max_row == 2


def test_empty_export_raises_before_writing(tmp_path):
    share = ShareService()
    service = ExportService(share, str(tmp_path / 'cache'))

    with pytest.raises(EmptyExportError) as exc_info:
        service.export_pdf(CUENTAS_LAYOUT, [])

    assert exc_info.value.title == 'Sin datos'
    assert exc_info.value.message == 'No hay cuentas por pagar para exportar.'
    assert not (tmp_path / 'cache').exists()
    assert share.last is None


def test_write_failure_becomes_export_error(tmp_path, cuentas):
    blocked = tmp_path / 'blocked'
    blocked.write_text('no soy un directorio')
    share = ShareService()
    service = ExportService(share, str(blocked / 'cache'))

    with pytest.raises(ExportError) as exc_info:
        service.export_excel(CUENTAS_LAYOUT, cuentas)

    assert not isinstance(exc_info.value, EmptyExportError)
    assert exc_info.value.message == 'No se pudo exportar el archivo Excel.'
    assert share.last is None


def test_share_history_is_bounded():
    share = ShareService(history=2)
    for i in range(3):
        share.share(f'/tmp/{i}.pdf', 'application/pdf', f'{i}.pdf')

    assert [s.filename for s in share.shared] == ['1.pdf', '2.pdf']


def test_control_characters_are_dropped_from_sheet(tmp_path):
    cuentas = [Payable(id=1, fecha='2024-01-15', proveedor='ACME\x01', importe=10,
                       estado='Pendiente', descripcion='línea\x0bdos')]
    service = ExportService(ShareService(), str(tmp_path / 'cache'))

    shared = service.export_excel(CUENTAS_LAYOUT, cuentas)

    ws = load_workbook(shared.path).active
    assert ws['B2'].value == 'ACME'
    assert ws['E2'].value == 'líneados'


def test_sheet_rejection_becomes_export_error(tmp_path, cuentas, monkeypatch):
    service = ExportService(ShareService(), str(tmp_path / 'cache'))

    def rechaza(layout, records):
        raise IllegalCharacterError('ACME cannot be used in worksheets.')

    monkeypatch.setattr(service, 'to_xlsx', rechaza)

    with pytest.raises(ExportError) as exc_info:
        service.export_excel(CUENTAS_LAYOUT, cuentas)
    assert exc_info.value.message == 'No se pudo exportar el archivo Excel.'
    assert service.share_service.last is None


def test_pdf_layout_failure_becomes_export_error(tmp_path, cuentas, monkeypatch):
    service = ExportService(ShareService(), str(tmp_path / 'cache'))

    def no_cabe(layout, records):
        raise LayoutError('Flowable too large on page 2')

    monkeypatch.setattr(service, 'to_pdf', no_cabe)

    with pytest.raises(ExportError) as exc_info:
        service.export_pdf(CUENTAS_LAYOUT, cuentas)
    assert exc_info.value.message == 'No se pudo exportar el archivo PDF.'
    assert service.share_service.last is None
