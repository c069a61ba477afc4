from datetime import date

import pytest

from app_negocio.models import (
    CuentaForm,
    Expense,
    Payable,
    Product,
    ProductoForm,
    ValidationError,
    parse_number,
    to_text,
)


@pytest.mark.parametrize('raw, expected', [
    ('150.50', 150.5),
    (' 7 ', 7.0),
    (3, 3.0),
    ('', None),
    ('abc', None),
    ('nan', None),
    ('inf', None),
    (None, None),
])
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


def test_to_text_drops_trailing_zero_decimals():
    assert to_text(150.0) == '150'
    assert to_text(150.5) == '150.5'
    assert to_text(12) == '12'
    assert to_text(None) == ''


def test_cuenta_form_defaults():
    form = CuentaForm()
    assert form.id is None
    assert form.fecha == date.today().isoformat()
    assert form.importe == '0'
    assert form.estado == 'Pendiente'


def test_default_form_is_not_saveable():
    # proveedor vacío e importe "0"
    with pytest.raises(ValidationError):
        CuentaForm().to_payload()


def test_cuenta_form_rejects_unknown_estado():
    form = CuentaForm(proveedor='ACME', importe='10', estado='Cancelado')
    with pytest.raises(ValidationError) as exc_info:
        form.to_payload()
    assert 'Cancelado' in exc_info.value.message


def test_cuenta_form_keeps_non_numeric_gasto_reference():
    form = CuentaForm(proveedor='ACME', importe='10', gasto_id='a1b2')
    assert form.to_payload()['gasto_id'] == 'a1b2'


def test_cuenta_form_superscript_digit_is_not_an_int():
    form = CuentaForm(proveedor='ACME', importe='10', gasto_id='²')
    assert form.to_payload()['gasto_id'] == '²'

    assert CuentaForm(proveedor='ACME', importe='10', gasto_id='12').to_payload()['gasto_id'] == 12


def test_payable_from_row_reads_joined_concepto():
    cuenta = Payable.from_dict({
        'id': 1, 'fecha': '2024-01-15', 'proveedor': 'ACME', 'importe': 10,
        'estado': 'Pagado', 'gasto_id': 4, 'gastos': {'concepto': 'Renta'},
    })
    assert cuenta.gasto_concepto == 'Renta'
    assert cuenta.is_valid()
    assert not Payable.from_dict({'id': 2, 'fecha': '2024-01-15'}).is_valid()


def test_payable_matches_either_field():
    cuenta = Payable(id=1, fecha='2024-01-15', proveedor='Pagos Rápidos', importe=1, estado='Pendiente')
    assert cuenta.matches('pagos')
    assert cuenta.matches('PENDIENTE')
    assert cuenta.matches('')
    assert not cuenta.matches('pagado')


def test_product_validity_requires_material_and_fields():
    product = Product(id=1, nombre='Rollo', existencia=0, precio=0.0, unidad='rollo')
    assert product.is_valid()
    assert not Product(id=1, nombre='Rollo', existencia=0, precio=0.0, unidad='rollo',
                       material='Kraft').is_valid()
    assert not Product(id=1, nombre='', existencia=0, precio=0.0, unidad='rollo').is_valid()


def test_producto_form_round_trip_from_product():
    form = ProductoForm.from_product(
        Product(id=1, nombre='Rollo', existencia=3.0, precio=9.5, unidad='rollo')
    )
    assert (form.existencia, form.precio) == ('3', '9.5')
    assert form.to_payload()['existencia'] == 3


def test_expense_from_row():
    gasto = Expense.from_dict({'id': 2, 'concepto': None})
    assert gasto.concepto == ''
