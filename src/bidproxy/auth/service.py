"""
Account service: profile lookup and onboarding.
"""

from __future__ import annotations

from fastapi import UploadFile

from bidproxy.auth.documents import DocumentStoreProtocol
from bidproxy.auth.models import User, UserRole
from bidproxy.auth.repository import UserRepository
from bidproxy.auth.schemas import CurrentUser
from bidproxy.config import Settings, get_settings
from bidproxy.shared.exceptions import UserNotFoundError, ValidationError
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)

ONBOARDING_ROLES = frozenset({UserRole.CUSTOMER, UserRole.EMPLOYEE})


class AccountService:
    """Service for account operations."""

    def __init__(
        self,
        repository: UserRepository,
        document_store: DocumentStoreProtocol,
        settings: Settings | None = None,
    ) -> None:
        self._repository = repository
        self._documents = document_store
        self._settings = settings or get_settings()

    async def get_profile(self, user: CurrentUser) -> User:
        account = await self._repository.get_by_id(user.id)
        if account is None:
            raise UserNotFoundError(user.id)
        return account

    async def complete_onboarding(
        self,
        user: CurrentUser,
        user_type: str,
        company_code: str | None = None,
        id_document: UploadFile | None = None,
        address_document: UploadFile | None = None,
    ) -> User:
        """Assign the account's role and verification data.

        Employees prove membership with the company code; customers upload an
        ID document and a proof of address. Both are verified on completion.
        Once verified, onboarding cannot run again, which keeps the role fixed.

        Raises:
            ValidationError: On an invalid role, wrong company code, missing
                documents, or a repeated onboarding.
            UserNotFoundError: If the account row disappeared.
        """
        try:
            role = UserRole(user_type)
        except ValueError:
            role = None
        if role not in ONBOARDING_ROLES:
            raise ValidationError("Invalid user type", details={"user_type": user_type})

        account = await self.get_profile(user)
        if account.onboarding_completed:
            raise ValidationError(
                "Onboarding already completed",
                details={"user_id": account.id, "role": account.role},
            )

        changes: dict[str, object] = {"role": role.value}

        if role is UserRole.EMPLOYEE:
            if not company_code or company_code != self._settings.company_code:
                logger.warning("Invalid company code presented", extra={"user_id": account.id})
                raise ValidationError("Invalid company code")
            changes.update(company_code=company_code, is_verified=True)
        else:
            if not _has_file(id_document) or not _has_file(address_document):
                raise ValidationError("ID and address documents are required")
            changes.update(
                id_document_url=await self._documents.save("idDocument", id_document),
                address_document_url=await self._documents.save(
                    "addressDocument", address_document
                ),
                # Auto-verified for now; manual review would flip this later.
                is_verified=True,
            )

        account = await self._repository.update(account, **changes)
        logger.info(
            "Onboarding completed",
            extra={"user_id": account.id, "role": account.role},
        )
        return account


def _has_file(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.filename)
