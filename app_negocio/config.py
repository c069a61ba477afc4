# ==============================================================================
# CONFIGURACIÓN - Variables de entorno (.env)
# ==============================================================================
# Se lee .env desde la raíz del proyecto y luego .env.local si existe.
# Las variables ya definidas en el entorno tienen prioridad sobre .env.
#
#   SUPABASE_URL        → URL base del almacén alojado
#   SUPABASE_KEY        → Clave anon/service del almacén
#   STORE_TIMEOUT       → Segundos por petición (vacío = sin límite)
#   NEGOCIO_SECRET_KEY  → Clave de sesión de Flask
#   EXPORT_CACHE_DIR    → Directorio de los archivos exportados
#   LOG_LEVEL           → Nivel del log raíz
#   PRODUCTION_MODE     → Avisa si faltan secretos (1/0)
# ==============================================================================

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / '.env', override=False)

LOCAL_ENV = BASE_DIR / '.env.local'
if LOCAL_ENV.exists():
    load_dotenv(LOCAL_ENV, override=True)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

_DEFAULT_SECRET = 'app_negocio_dev_secret_key_change_in_production'


def _flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def parse_timeout(raw: Optional[str]) -> Optional[float]:
    """
    Interpreta STORE_TIMEOUT.

    Vacío o no positivo = sin límite (None).
    """
    if raw is None or not str(raw).strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"STORE_TIMEOUT inválido: {raw!r}")
    return value if value > 0 else None


class Config:
    """Configuración de la aplicación leída del entorno."""

    SUPABASE_URL = os.getenv('SUPABASE_URL', 'http://localhost:54321')
    SUPABASE_KEY = os.getenv('SUPABASE_KEY', '')
    STORE_TIMEOUT = parse_timeout(os.getenv('STORE_TIMEOUT'))

    PRODUCTION_MODE = _flag('PRODUCTION_MODE')
    SECRET_KEY = os.getenv('NEGOCIO_SECRET_KEY') or _DEFAULT_SECRET

    EXPORT_CACHE_DIR = os.getenv('EXPORT_CACHE_DIR') or os.path.join(
        tempfile.gettempdir(), 'app_negocio_exports'
    )

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    @classmethod
    def warnings(cls):
        """Avisos de configuración incompleta para mostrar al arrancar."""
        found = []
        if cls.PRODUCTION_MODE and not os.getenv('NEGOCIO_SECRET_KEY'):
            found.append('PRODUCTION_MODE activo sin NEGOCIO_SECRET_KEY definida')
        if cls.PRODUCTION_MODE and not cls.SUPABASE_KEY:
            found.append('PRODUCTION_MODE activo sin SUPABASE_KEY definida')
        return found


def configure_logging(level: str = None) -> None:
    """Handler de consola con fecha para el log raíz (solo una vez)."""
    root = logging.getLogger()
    root.setLevel(level or Config.LOG_LEVEL)
    if not any(getattr(h, '_app_negocio', False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._app_negocio = True
        root.addHandler(handler)
