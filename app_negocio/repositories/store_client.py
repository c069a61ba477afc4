# ==============================================================================
# CLIENTE DEL ALMACÉN REMOTO - Constructor de consultas sobre PostgREST
# ==============================================================================
# El almacén es una base relacional alojada que expone cada tabla en
# /rest/v1/<tabla>. Este cliente arma la consulta con verbos encadenables:
#
#   client.table('productos').select('*').eq('material', 'Celofán') \
#         .order('nombre').execute()
#
# Hay una sola instancia por proceso (ver app_container.py) y es de solo
# lectura: no guarda estado entre consultas.
# ==============================================================================

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import requests

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """
    Fallo de una llamada al almacén (HTTP >= 400 o error de transporte).

    Attributes:
        message: Mensaje legible devuelto por el almacén
        status: Código HTTP si hubo respuesta
        details: Cuerpo de error crudo, si existe
    """

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


@dataclass
class StoreResponse:
    """Resultado de una consulta: filas devueltas y código HTTP."""
    data: List[Dict[str, Any]] = field(default_factory=list)
    status: int = 200


class TableQuery:
    """
    Consulta sobre una tabla. Cada verbo devuelve la misma instancia para
    poder encadenar; `execute()` la envía.
    """

    def __init__(self, client: 'StoreClient', table: str):
        self._client = client
        self._table = table
        self._method = 'GET'
        self._columns = '*'
        self._filters: List[Tuple[str, str]] = []
        self._order: Optional[str] = None
        self._payload: Any = None

    @property
    def table(self) -> str:
        return self._table

    # -------------------------------------------------------------------------
    # Verbos
    # -------------------------------------------------------------------------

    def select(self, columns: str = '*') -> 'TableQuery':
        self._method = 'GET'
        self._columns = columns
        return self

    def insert(self, rows: Union[Dict[str, Any], List[Dict[str, Any]]]) -> 'TableQuery':
        self._method = 'POST'
        self._payload = rows if isinstance(rows, list) else [rows]
        return self

    def update(self, values: Dict[str, Any]) -> 'TableQuery':
        self._method = 'PATCH'
        self._payload = values
        return self

    def delete(self) -> 'TableQuery':
        self._method = 'DELETE'
        return self

    # -------------------------------------------------------------------------
    # Filtros y orden
    # -------------------------------------------------------------------------

    def eq(self, column: str, value: Any) -> 'TableQuery':
        self._filters.append((column, f'eq.{value}'))
        return self

    def order(self, column: str, ascending: bool = True) -> 'TableQuery':
        self._order = f"{column}.{'asc' if ascending else 'desc'}"
        return self

    def build_params(self) -> List[Tuple[str, str]]:
        """Parámetros de query string en el dialecto PostgREST."""
        params: List[Tuple[str, str]] = []
        if self._method == 'GET':
            params.append(('select', self._columns))
        params.extend(self._filters)
        if self._order and self._method == 'GET':
            params.append(('order', self._order))
        return params

    def execute(self) -> StoreResponse:
        """
        Envía la consulta.

        Raises:
            StoreError: Si el almacén responde con error o no hay conexión
        """
        # Un UPDATE/DELETE sin filtro afectaría toda la tabla
        if self._method in ('PATCH', 'DELETE') and not self._filters:
            raise StoreError(f"{self._method} sobre '{self._table}' requiere un filtro")
        return self._client.request(self._method, self._table, self.build_params(), self._payload)


class StoreClient:
    """
    Conexión al almacén alojado.

    Args:
        url: URL base del proyecto (ej. https://xyz.supabase.co)
        key: Clave anónima o de servicio
        timeout: Segundos de espera; None = sin límite
        session: Sesión HTTP a reutilizar (inyectable en tests)
    """

    def __init__(
        self,
        url: str,
        key: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.url = url.rstrip('/')
        self.key = key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def rest_url(self) -> str:
        return f'{self.url}/rest/v1'

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    def _headers(self, method: str) -> Dict[str, str]:
        headers = {
            'apikey': self.key,
            'Authorization': f'Bearer {self.key}',
            'Accept': 'application/json',
        }
        if method != 'GET':
            headers['Content-Type'] = 'application/json'
            headers['Prefer'] = 'return=representation'
        return headers

    def request(
        self,
        method: str,
        table: str,
        params: List[Tuple[str, str]],
        payload: Any = None
    ) -> StoreResponse:
        """Ejecuta una petición HTTP contra una tabla y normaliza la respuesta."""
        endpoint = f'{self.rest_url}/{table}'
        try:
            resp = self.session.request(
                method,
                endpoint,
                params=params,
                json=payload,
                headers=self._headers(method),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Store %s %s failed: %s", method, table, exc)
            raise StoreError(f'No se pudo conectar con el almacén: {exc}') from exc

        if resp.status_code >= 400:
            message, details = _error_from_response(resp)
            logger.warning("Store %s %s -> %s: %s", method, table, resp.status_code, message)
            raise StoreError(message, status=resp.status_code, details=details)

        if not resp.content:
            return StoreResponse(data=[], status=resp.status_code)

        body = resp.json()
        if isinstance(body, dict):
            body = [body]
        return StoreResponse(data=body or [], status=resp.status_code)


def _error_from_response(resp: requests.Response) -> Tuple[str, Any]:
    """Extrae el mensaje de error de una respuesta PostgREST."""
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or f'HTTP {resp.status_code}'), None
    if isinstance(body, dict):
        return str(body.get('message') or body.get('error') or f'HTTP {resp.status_code}'), body
    return f'HTTP {resp.status_code}', body
