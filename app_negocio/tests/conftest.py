import os
import re
import tempfile

import pytest

# Los logs de profiling de los tests no van al paquete
os.environ.setdefault('NEGOCIO_LOGS_DIR', tempfile.mkdtemp(prefix='app_negocio_logs_'))

from app_negocio.app_container import AppContainer, get_container
from app_negocio.config import Config
from app_negocio.repositories import StoreError, StoreResponse
from app_negocio.services import ExportService, Notifier, ShareService


# ═══════════════════════════════════════════════════════════════════════════
# ALMACÉN EN MEMORIA
# ═══════════════════════════════════════════════════════════════════════════

class FakeQuery:
    """Mismo encadenamiento que TableQuery, resuelto contra FakeStore."""

    def __init__(self, store, table):
        self.store = store
        self.table = table
        self.method = 'GET'
        self.columns = '*'
        self.filters = []
        self.order_by = None
        self.payload = None

    def select(self, columns='*'):
        self.method = 'GET'
        self.columns = columns
        return self

    def insert(self, rows):
        self.method = 'POST'
        self.payload = rows if isinstance(rows, list) else [rows]
        return self

    def update(self, values):
        self.method = 'PATCH'
        self.payload = values
        return self

    def delete(self):
        self.method = 'DELETE'
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, ascending=True):
        self.order_by = (column, ascending)
        return self

    def execute(self):
        return self.store.execute(self)


class FakeStore:
    """
    Tablas en memoria con registro de llamadas.

    `fail(table, method)` hace que la próxima llamada de ese tipo falle.
    """

    def __init__(self):
        self.tables = {'productos': [], 'cuentas_por_pagar': [], 'gastos': []}
        self.calls = []
        self.failures = {}
        self._next_id = 100

    def table(self, name):
        return FakeQuery(self, name)

    def seed(self, table, rows):
        self.tables[table].extend(dict(r) for r in rows)

    def fail(self, table, method, message='boom'):
        self.failures[(table, method)] = message

    def count(self, table, method):
        return sum(1 for c in self.calls if c['table'] == table and c['method'] == method)

    def _matches(self, row, filters):
        return all(row.get(col) == value for col, value in filters)

    def _expand(self, table, row, columns):
        row = dict(row)
        if table == 'cuentas_por_pagar' and 'gastos(concepto)' in columns:
            gasto = next((g for g in self.tables['gastos'] if g['id'] == row.get('gasto_id')), None)
            row['gastos'] = {'concepto': gasto['concepto']} if gasto else None
        return row

    def execute(self, query):
        self.calls.append({
            'table': query.table,
            'method': query.method,
            'filters': list(query.filters),
            'payload': query.payload,
            'columns': query.columns,
            'order': query.order_by,
        })
        message = self.failures.pop((query.table, query.method), None)
        if message is not None:
            raise StoreError(message, status=500)

        rows = self.tables[query.table]
        if query.method == 'GET':
            result = [self._expand(query.table, r, query.columns) for r in rows
                      if self._matches(r, query.filters)]
            if query.order_by:
                column, ascending = query.order_by
                result.sort(key=lambda r: r.get(column) or '', reverse=not ascending)
            return StoreResponse(data=result)

        if query.method == 'POST':
            inserted = []
            for payload in query.payload:
                self._next_id += 1
                row = dict(payload, id=self._next_id)
                rows.append(row)
                inserted.append(row)
            return StoreResponse(data=inserted, status=201)

        if query.method == 'PATCH':
            updated = [r for r in rows if self._matches(r, query.filters)]
            for row in updated:
                row.update(query.payload)
            return StoreResponse(data=updated)

        removed = [r for r in rows if self._matches(r, query.filters)]
        self.tables[query.table] = [r for r in rows if r not in removed]
        return StoreResponse(data=removed)


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def export_service(tmp_path):
    return ExportService(ShareService(), str(tmp_path / 'exports'))


@pytest.fixture
def container(store, tmp_path):
    AppContainer.reset_instance()
    test_config = type('TestConfig', (Config,), {'EXPORT_CACHE_DIR': str(tmp_path / 'exports')})
    c = get_container(test_config)
    c.store_client = store
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def client(container):
    from app_negocio.main import app
    app.config['TESTING'] = True
    with app.test_client() as c:
        yield c


@pytest.fixture
def csrf_token(client):
    # GET a una pantalla para obtener el token de sesión
    r = client.get('/celofan')
    assert r.status_code == 200
    m = re.search(r'name="csrf_token" value="([0-9a-f]+)"', r.get_data(as_text=True))
    assert m, 'no csrf token in page'
    return m.group(1)


# ═══════════════════════════════════════════════════════════════════════════
# DATOS DE EJEMPLO
# ═══════════════════════════════════════════════════════════════════════════

GASTOS = [
    {'id': 1, 'concepto': 'Renta local', 'fecha': '2024-01-01'},
    {'id': 2, 'concepto': 'Luz', 'fecha': '2024-01-10'},
]

CUENTAS = [
    {'id': 7, 'fecha': '2024-01-15', 'proveedor': 'ACME', 'importe': 150.5,
     'estado': 'Pendiente', 'descripcion': None, 'gasto_id': None},
    {'id': 8, 'fecha': '2024-02-01', 'proveedor': 'Papelera del Norte', 'importe': 320,
     'estado': 'Pagado', 'descripcion': 'Rollos', 'gasto_id': 1},
    {'id': 9, 'fecha': '2024-02-03', 'proveedor': 'Pendientes SA', 'importe': 80,
     'estado': 'Pagado', 'descripcion': None, 'gasto_id': None},
    # Incompleta: sin importe
    {'id': 10, 'fecha': '2024-02-05', 'proveedor': 'Roto', 'importe': None,
     'estado': 'Pendiente', 'descripcion': None, 'gasto_id': None},
]

PRODUCTOS = [
    {'id': 1, 'nombre': 'Rollo transparente', 'existencia': 12, 'precio': 45.0,
     'unidad': 'rollo', 'material': 'Celofán'},
    {'id': 2, 'nombre': 'Bolsa celofán 10x15', 'existencia': 300, 'precio': 0.8,
     'unidad': 'pieza', 'material': 'Celofán'},
    # Incompleto: sin unidad
    {'id': 3, 'nombre': 'Sin unidad', 'existencia': 1, 'precio': 1.0,
     'unidad': None, 'material': 'Celofán'},
    # Otro material
    {'id': 4, 'nombre': 'Bolsa kraft', 'existencia': 50, 'precio': 2.0,
     'unidad': 'pieza', 'material': 'Kraft'},
]


@pytest.fixture
def seeded_store(store):
    store.seed('gastos', GASTOS)
    store.seed('cuentas_por_pagar', CUENTAS)
    store.seed('productos', PRODUCTOS)
    return store
