# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (se puede reemplazar el cliente del almacén)
#   - Cambiar de almacén sin tocar servicios
#
# Compartido por todo el proceso:
#   - StoreClient (conexión de solo lectura de configuración)
#   - Repositorios y ExportService
#
# Por petición (cada pantalla tiene su propio estado):
#   - CelofanService / CuentasService, creados con su Notifier
# ==============================================================================

from typing import Optional

from app_negocio.config import Config
from app_negocio.repositories import (
    ExpenseRepository,
    IStoreClient,
    PayableRepository,
    ProductRepository,
    StoreClient,
)
from app_negocio.services import (
    CelofanService,
    CuentasService,
    ExportService,
    Notifier,
    ShareService,
)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única conexión al
    almacén y una única instancia de cada repositorio.

    Uso:
        container = get_container()
        service = container.cuentas_service(Notifier())
        service.mount()
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, config: type = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config: type = None):
        """
        Inicializa el contenedor.

        Args:
            config: Clase de configuración (por defecto Config)
        """
        if self._initialized:
            return

        self._config = config or Config

        # Inicialización perezosa
        self._store_client: Optional[IStoreClient] = None
        self._product_repo: Optional[ProductRepository] = None
        self._payable_repo: Optional[PayableRepository] = None
        self._expense_repo: Optional[ExpenseRepository] = None
        self._share_service: Optional[ShareService] = None
        self._export_service: Optional[ExportService] = None

        self._initialized = True

    @property
    def config(self) -> type:
        return self._config

    # =========================================================================
    # ALMACÉN
    # =========================================================================

    @property
    def store_client(self) -> IStoreClient:
        """Cliente del almacén (singleton)."""
        if self._store_client is None:
            self._store_client = StoreClient(
                self._config.SUPABASE_URL,
                self._config.SUPABASE_KEY,
                timeout=self._config.STORE_TIMEOUT,
            )
        return self._store_client

    @store_client.setter
    def store_client(self, client: IStoreClient) -> None:
        """Reemplaza el cliente (tests). Los repositorios se recrean."""
        self._store_client = client
        self._product_repo = None
        self._payable_repo = None
        self._expense_repo = None

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def product_repo(self) -> ProductRepository:
        """Repositorio de productos (singleton)."""
        if self._product_repo is None:
            self._product_repo = ProductRepository(self.store_client)
        return self._product_repo

    @property
    def payable_repo(self) -> PayableRepository:
        """Repositorio de cuentas por pagar (singleton)."""
        if self._payable_repo is None:
            self._payable_repo = PayableRepository(self.store_client)
        return self._payable_repo

    @property
    def expense_repo(self) -> ExpenseRepository:
        """Repositorio de gastos (singleton)."""
        if self._expense_repo is None:
            self._expense_repo = ExpenseRepository(self.store_client)
        return self._expense_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def share_service(self) -> ShareService:
        if self._share_service is None:
            self._share_service = ShareService()
        return self._share_service

    @property
    def export_service(self) -> ExportService:
        """Servicio de exportación (singleton)."""
        if self._export_service is None:
            self._export_service = ExportService(
                self.share_service,
                self._config.EXPORT_CACHE_DIR
            )
        return self._export_service

    def celofan_service(self, notifier: Notifier) -> CelofanService:
        """Estado nuevo de la pantalla de celofán."""
        return CelofanService(self.product_repo, notifier, self.export_service)

    def cuentas_service(self, notifier: Notifier) -> CuentasService:
        """Estado nuevo de la pantalla de cuentas por pagar."""
        return CuentasService(
            self.payable_repo,
            self.expense_repo,
            notifier,
            self.export_service
        )

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """
        Reinicia todas las instancias.
        Útil para testing.
        """
        self._store_client = None
        self._product_repo = None
        self._payable_repo = None
        self._expense_repo = None
        self._share_service = None
        self._export_service = None

    @classmethod
    def get_instance(cls, config: type = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            config: Configuración (solo se usa en primera llamada)
        """
        if cls._instance is None:
            return cls(config)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


# Función helper para obtener el contenedor global
def get_container(config: type = None) -> AppContainer:
    """
    Obtiene el contenedor de dependencias global.

    Args:
        config: Configuración de la aplicación

    Returns:
        Instancia del contenedor
    """
    return AppContainer.get_instance(config)
