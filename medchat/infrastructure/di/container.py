"""
Dependency Injection Container

"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from ..config.settings import Settings, get_settings
from ..adapters.database.connection import DatabaseManager
from ..adapters.storage.file_storage import FileStorage, FileStorageFactory
from ..adapters.database.repositories import (
    ProfileRepositoryImpl,
    ChatRepositoryImpl,
    AttachmentRepositoryImpl,
    PrescriptionRepositoryImpl,
    DatabaseRateLimitStore,
)
from ..adapters.rate_limit import InMemoryRateLimitStore, RedisRateLimitStore
from ..adapters.services import ChatServiceFactory
from ..adapters.auth import HeaderIdentityProvider
from ...core.domain.repositories import (
    ProfileRepository,
    ChatRepository,
    AttachmentRepository,
    PrescriptionRepository,
    RateLimitStore,
)
from ...core.domain.services import (
    ChatService,
    SpecialtyCatalog,
    RateLimiter,
    AttachmentPolicy,
    PrescriptionParser,
    IdentityProvider,
)
from ...core.application.use_cases import (
    ProfileUseCase,
    ChatUseCase,
    AttachmentUseCase,
    PrescriptionUseCase,
)
from ...shared.exceptions import ConfigurationError


class DIContainer:
    """
    Dependency Injection Container.

    Holds process-wide singletons (settings, database manager, storage,
    inference provider, rate limiter) and builds per-request use cases
    around a fresh database session.
    """

    def __init__(self):
        """Initialize the DI container."""
        self._singletons: Dict[str, Any] = {}
        self._settings: Optional[Settings] = None
        self._db_manager: Optional[DatabaseManager] = None
        self._file_storage: Optional[FileStorage] = None
        self._chat_service: Optional[ChatService] = None
        self._rate_limit_store: Optional[RateLimitStore] = None
        self._logger = logging.getLogger(__name__)

    def register_settings(self, settings: Settings) -> None:
        self._settings = settings

    def register_database_manager(self, db_manager: DatabaseManager) -> None:
        self._db_manager = db_manager

    def register_file_storage(self, file_storage: FileStorage) -> None:
        self._file_storage = file_storage

    def register_chat_service(self, chat_service: ChatService) -> None:
        """
        Register the inference provider.

        Used by tests to substitute a scripted provider.
        """
        self._chat_service = chat_service

    def register_rate_limit_store(self, store: RateLimitStore) -> None:
        self._rate_limit_store = store
        self._singletons.pop('rate_limiter', None)

    def get_settings(self) -> Settings:
        """
        Get application settings.

        Raises:
            ConfigurationError: If settings not registered
        """
        if self._settings is None:
            raise ConfigurationError("Settings not registered in DI container")
        return self._settings

    def get_database_manager(self) -> DatabaseManager:
        """
        Get database manager.

        Raises:
            ConfigurationError: If database manager not registered
        """
        if self._db_manager is None:
            raise ConfigurationError("Database manager not registered in DI container")
        return self._db_manager

    def get_file_storage(self) -> FileStorage:
        """
        Get file storage service.

        Raises:
            ConfigurationError: If file storage not registered
        """
        if self._file_storage is None:
            raise ConfigurationError("File storage not registered in DI container")
        return self._file_storage

    def get_chat_service(self) -> ChatService:
        """
        Get the inference provider, creating it on first use.

        Raises:
            ConfigurationError: If the provider cannot be created
        """
        if self._chat_service is None:
            self._chat_service = ChatServiceFactory.create_chat_service(self.get_settings().ai_service)
        return self._chat_service

    def get_rate_limit_store(self) -> RateLimitStore:
        """Get the rate-limit store selected by ``RATE_LIMIT_BACKEND``."""
        if self._rate_limit_store is None:
            settings = self.get_settings()
            backend = settings.rate_limit.rate_limit_backend

            if backend == "database":
                self._rate_limit_store = DatabaseRateLimitStore(self.get_database_manager())
            elif backend == "redis":
                self._rate_limit_store = RedisRateLimitStore.from_url(settings.redis.redis_url)
            elif backend == "memory":
                self._rate_limit_store = InMemoryRateLimitStore()
            else:
                raise ConfigurationError(f"Unsupported rate limit backend: {backend}", "RATE_LIMIT_BACKEND")

            self._logger.info(f"Using {backend} rate limit store")

        return self._rate_limit_store

    def get_rate_limiter(self) -> RateLimiter:
        if 'rate_limiter' not in self._singletons:
            rate_limit = self.get_settings().rate_limit
            self._singletons['rate_limiter'] = RateLimiter(
                store=self.get_rate_limit_store(),
                limit=rate_limit.rate_limit_requests,
                window_seconds=rate_limit.rate_limit_window_seconds
            )
        return self._singletons['rate_limiter']

    def get_specialty_catalog(self) -> SpecialtyCatalog:
        if 'specialty_catalog' not in self._singletons:
            self._singletons['specialty_catalog'] = SpecialtyCatalog()
        return self._singletons['specialty_catalog']

    def get_attachment_policy(self) -> AttachmentPolicy:
        if 'attachment_policy' not in self._singletons:
            self._singletons['attachment_policy'] = AttachmentPolicy()
        return self._singletons['attachment_policy']

    def get_prescription_parser(self) -> PrescriptionParser:
        if 'prescription_parser' not in self._singletons:
            self._singletons['prescription_parser'] = PrescriptionParser()
        return self._singletons['prescription_parser']

    def get_identity_provider(self) -> IdentityProvider:
        if 'identity_provider' not in self._singletons:
            self._singletons['identity_provider'] = HeaderIdentityProvider(self.get_database_manager())
        return self._singletons['identity_provider']

    def get_profile_repository(self, session: AsyncSession) -> ProfileRepository:
        return ProfileRepositoryImpl(session)

    def get_chat_repository(self, session: AsyncSession) -> ChatRepository:
        return ChatRepositoryImpl(session)

    def get_attachment_repository(self, session: AsyncSession) -> AttachmentRepository:
        return AttachmentRepositoryImpl(session)

    def get_prescription_repository(self, session: AsyncSession) -> PrescriptionRepository:
        return PrescriptionRepositoryImpl(session)

    def build_profile_use_case(self, session: AsyncSession) -> ProfileUseCase:
        return ProfileUseCase(
            profile_repository=self.get_profile_repository(session),
            specialty_catalog=self.get_specialty_catalog()
        )

    def build_chat_use_case(self, session: AsyncSession) -> ChatUseCase:
        ai_settings = self.get_settings().ai_service
        return ChatUseCase(
            chat_repository=self.get_chat_repository(session),
            attachment_repository=self.get_attachment_repository(session),
            profile_repository=self.get_profile_repository(session),
            chat_service=self.get_chat_service(),
            rate_limiter=self.get_rate_limiter(),
            specialty_catalog=self.get_specialty_catalog(),
            attachment_policy=self.get_attachment_policy(),
            file_storage=self.get_file_storage(),
            default_temperature=ai_settings.temperature,
            default_max_tokens=ai_settings.max_tokens,
            history_window=ai_settings.history_window
        )

    def build_attachment_use_case(self, session: AsyncSession) -> AttachmentUseCase:
        return AttachmentUseCase(
            chat_repository=self.get_chat_repository(session),
            attachment_repository=self.get_attachment_repository(session),
            file_storage=self.get_file_storage(),
            attachment_policy=self.get_attachment_policy()
        )

    def build_prescription_use_case(self, session: AsyncSession) -> PrescriptionUseCase:
        ai_settings = self.get_settings().ai_service
        return PrescriptionUseCase(
            chat_repository=self.get_chat_repository(session),
            prescription_repository=self.get_prescription_repository(session),
            chat_service=self.get_chat_service(),
            rate_limiter=self.get_rate_limiter(),
            specialty_catalog=self.get_specialty_catalog(),
            prescription_parser=self.get_prescription_parser(),
            max_tokens=ai_settings.max_tokens,
            history_window=ai_settings.history_window
        )

    @asynccontextmanager
    async def profile_use_case_scope(self) -> AsyncGenerator[ProfileUseCase, None]:
        async with self.get_database_manager().get_session() as session:
            yield self.build_profile_use_case(session)

    @asynccontextmanager
    async def chat_use_case_scope(self) -> AsyncGenerator[ChatUseCase, None]:
        """
        Chat use case bound to its own database session.

        The session commits when the block exits normally.
        """
        async with self.get_database_manager().get_session() as session:
            yield self.build_chat_use_case(session)

    @asynccontextmanager
    async def attachment_use_case_scope(self) -> AsyncGenerator[AttachmentUseCase, None]:
        async with self.get_database_manager().get_session() as session:
            yield self.build_attachment_use_case(session)

    @asynccontextmanager
    async def prescription_use_case_scope(self) -> AsyncGenerator[PrescriptionUseCase, None]:
        async with self.get_database_manager().get_session() as session:
            yield self.build_prescription_use_case(session)

    async def initialize(self, settings: Optional[Settings] = None) -> None:
        """
        Initialize the DI container with default services.

        Anything registered beforehand is kept. Creates tables when
        ``AUTO_CREATE_TABLES`` is set.
        """
        if self._settings is None:
            self.register_settings(settings or get_settings())

        if self._db_manager is None:
            self.register_database_manager(DatabaseManager(self._settings.database))

        if self._file_storage is None:
            self.register_file_storage(FileStorageFactory.create_storage(self._settings.file_storage))

        if self._settings.database.auto_create_tables:
            await self._db_manager.create_tables()

    async def cleanup(self) -> None:
        """
        Cleanup resources managed by the container.
        """
        if isinstance(self._rate_limit_store, RedisRateLimitStore):
            await self._rate_limit_store.close()

        if self._db_manager:
            await self._db_manager.close()

        self._singletons.clear()


# Global container instance
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """
    Get or create the global DI container.

    Returns:
        DI container instance
    """
    global _container

    if _container is None:
        _container = DIContainer()

    return _container


async def initialize_container(settings: Optional[Settings] = None) -> DIContainer:
    """
    Initialize the global DI container with default services.

    Returns:
        Initialized DI container
    """
    container = get_container()
    await container.initialize(settings)
    return container


async def cleanup_container() -> None:
    """
    Cleanup the global DI container.
    """
    global _container

    if _container:
        await _container.cleanup()
        _container = None
