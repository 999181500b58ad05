"""Dependency injection container for the parser client and services."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .core import DaxtraParserClient
from .schemas import AppConfig
from .services import ConversionService, JobVacancyService, ResumeParsingService


class ParserContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    # one client per container, created on first use even under concurrent access
    client = providers.ThreadSafeSingleton(
        DaxtraParserClient,
        base_url=config.daxtra.base_url,
        account=config.daxtra.account,
        jwt_secret=config.daxtra.jwt_secret,
        default_timeout_ms=config.daxtra.timeout_ms,
        turbo=config.daxtra.turbo,
        token_ttl_seconds=config.daxtra.token_ttl_seconds,
    )

    resume_service = providers.Factory(ResumeParsingService, client=client)
    vacancy_service = providers.Factory(JobVacancyService, client=client)
    conversion_service = providers.Factory(ConversionService, client=client)


def create_container(*, settings: AppConfig | dict[str, Any] | None = None) -> ParserContainer:
    """Instantiate container from validated settings."""

    container = ParserContainer()
    if settings is None:
        return container

    app_config = settings if isinstance(settings, AppConfig) else AppConfig.model_validate(settings)
    container.config.from_dict(app_config.model_dump())
    return container
