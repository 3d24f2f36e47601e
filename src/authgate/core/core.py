from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from authgate.config import Config
from authgate.core.kv import KeyValueStore
from authgate.core.modules.token.signer import TokenSigner

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    @property
    def kv(self) -> KeyValueStore:
        """Key-value store shared by all services."""
        return self.core.kv

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from authgate.core.modules.access.service import AccessService  # noqa: PLC0415
    from authgate.core.modules.ban.service import BanService  # noqa: PLC0415
    from authgate.core.modules.credential.service import CredentialService  # noqa: PLC0415
    from authgate.core.modules.otp.service import OtpService  # noqa: PLC0415
    from authgate.core.modules.revocation.service import RevocationService  # noqa: PLC0415
    from authgate.core.modules.session.service import SessionService  # noqa: PLC0415
    from authgate.core.modules.user.service import UserService  # noqa: PLC0415

    user: UserService
    ban: BanService
    otp: OtpService
    session: SessionService
    credential: CredentialService
    revocation: RevocationService
    access: AccessService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._database = database

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for initialization - user must be first
        service_configs = [
            ("user", "authgate.core.modules.user.service", "UserService"),
            ("ban", "authgate.core.modules.ban.service", "BanService"),
            ("otp", "authgate.core.modules.otp.service", "OtpService"),
            ("session", "authgate.core.modules.session.service", "SessionService"),
            ("credential", "authgate.core.modules.credential.service", "CredentialService"),
            ("revocation", "authgate.core.modules.revocation.service", "RevocationService"),
            ("access", "authgate.core.modules.access.service", "AccessService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services that have cleanup logic."""
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, database, key-value store, token signer and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    kv: KeyValueStore
    signer: TokenSigner
    services: Services

    def __init__(self, config: Config) -> None:
        """Initialize core with config, MongoDB, Redis, and auto-register services."""
        self.config = config
        self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard")
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.kv = KeyValueStore.from_url(config.redis_url, timeout=config.redis_timeout)
        self.signer = TokenSigner(config.jwt_secret)
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Check the key-value store and start all services."""
        await self.kv.ping()
        await self.services.start_all()
        logger.info("core_started", environment=self.config.environment)

    async def on_stop(self) -> None:
        """Stop services and close store connections on shutdown."""
        await self.services.stop_all()
        await self.kv.aclose()
        await self.mongo_client.aclose()
