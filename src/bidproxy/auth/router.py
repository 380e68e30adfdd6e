"""
Account API router: current profile and onboarding.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from bidproxy.auth.documents import DocumentStoreProtocol, get_document_store
from bidproxy.auth.middleware import CurrentUserDep
from bidproxy.auth.repository import UserRepository
from bidproxy.auth.schemas import UserProfile
from bidproxy.auth.service import AccountService
from bidproxy.shared.database import get_db_session

router = APIRouter(prefix="/api", tags=["auth"])


def get_account_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    documents: Annotated[DocumentStoreProtocol, Depends(get_document_store)],
) -> AccountService:
    """Dependency for account service."""
    return AccountService(UserRepository(session), documents)


AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


@router.get("/auth/user", response_model=UserProfile)
async def get_auth_user(
    current_user: CurrentUserDep,
    service: AccountServiceDep,
) -> UserProfile:
    """Return the authenticated caller's profile."""
    user = await service.get_profile(current_user)
    return UserProfile.model_validate(user)


@router.post("/onboarding/complete", response_model=UserProfile)
async def complete_onboarding(
    current_user: CurrentUserDep,
    service: AccountServiceDep,
    user_type: Annotated[str, Form(alias="userType")],
    company_code: Annotated[str | None, Form(alias="companyCode")] = None,
    id_document: Annotated[UploadFile | None, File(alias="idDocument")] = None,
    address_document: Annotated[UploadFile | None, File(alias="addressDocument")] = None,
) -> UserProfile:
    """Complete onboarding as a customer (documents) or employee (company code)."""
    user = await service.complete_onboarding(
        current_user,
        user_type=user_type,
        company_code=company_code,
        id_document=id_document,
        address_document=address_document,
    )
    return UserProfile.model_validate(user)
