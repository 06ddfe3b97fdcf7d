"""
FastAPI Dependencies

"""
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request

from .container import DIContainer, get_container
from ...core.application.use_cases import (
    ProfileUseCase,
    ChatUseCase,
    AttachmentUseCase,
    PrescriptionUseCase,
)
from ...core.domain.entities import Profile
from ...core.domain.services import RateLimiter, SpecialtyCatalog


async def get_current_user(
    request: Request,
    container: DIContainer = Depends(get_container)
) -> Profile:
    """
    Resolve the calling profile.

    Raises:
        AuthenticationError: If the caller cannot be identified
    """
    return await container.get_identity_provider().authenticate(request.headers)


async def get_profile_use_case(
    container: DIContainer = Depends(get_container)
) -> AsyncGenerator[ProfileUseCase, None]:
    async with container.profile_use_case_scope() as use_case:
        yield use_case


async def get_chat_use_case(
    container: DIContainer = Depends(get_container)
) -> AsyncGenerator[ChatUseCase, None]:
    """
    Get chat use case dependency.

    Yields:
        Chat use case bound to a request-scoped database session
    """
    async with container.chat_use_case_scope() as use_case:
        yield use_case


async def get_attachment_use_case(
    container: DIContainer = Depends(get_container)
) -> AsyncGenerator[AttachmentUseCase, None]:
    async with container.attachment_use_case_scope() as use_case:
        yield use_case


async def get_prescription_use_case(
    container: DIContainer = Depends(get_container)
) -> AsyncGenerator[PrescriptionUseCase, None]:
    async with container.prescription_use_case_scope() as use_case:
        yield use_case


def get_rate_limiter(container: DIContainer = Depends(get_container)) -> RateLimiter:
    return container.get_rate_limiter()


def get_specialty_catalog(container: DIContainer = Depends(get_container)) -> SpecialtyCatalog:
    return container.get_specialty_catalog()


# Type aliases for cleaner dependency injection
CurrentUserDep = Annotated[Profile, Depends(get_current_user)]
ContainerDep = Annotated[DIContainer, Depends(get_container)]
ProfileUseCaseDep = Annotated[ProfileUseCase, Depends(get_profile_use_case)]
ChatUseCaseDep = Annotated[ChatUseCase, Depends(get_chat_use_case)]
AttachmentUseCaseDep = Annotated[AttachmentUseCase, Depends(get_attachment_use_case)]
PrescriptionUseCaseDep = Annotated[PrescriptionUseCase, Depends(get_prescription_use_case)]
RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]
SpecialtyCatalogDep = Annotated[SpecialtyCatalog, Depends(get_specialty_catalog)]
