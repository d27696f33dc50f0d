"""Create User Use Case."""

from src.application.dto.mappers import user_to_response
from src.application.dto.requests import CreateUserRequest
from src.application.dto.responses import UserResponse
from src.config import get_logger
from src.core.entities.user import User
from src.core.exceptions import DuplicateEmailError, ValidationError
from src.core.interfaces import UnitOfWorkFactory

logger = get_logger(__name__)


class CreateUserUseCase:
    """Register a user that can request, approve or perform work."""

    def __init__(self, uow_factory: UnitOfWorkFactory | None = None):
        self._uow_factory = uow_factory

    async def _get_uow_factory(self) -> UnitOfWorkFactory:
        if self._uow_factory is None:
            from src.application.services import get_uow_factory

            self._uow_factory = await get_uow_factory()
        return self._uow_factory

    async def execute(self, request: CreateUserRequest) -> User:
        email = request.email.strip().lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValidationError("email", "A valid email address is required", request.email)
        for field in ("first_name", "last_name"):
            if not getattr(request, field).strip():
                raise ValidationError(field, "Required")

        uow_factory = await self._get_uow_factory()
        async with uow_factory() as uow:
            if await uow.users.get_by_email(email) is not None:
                raise DuplicateEmailError(email)

            user = await uow.users.add(
                User(
                    email=email,
                    first_name=request.first_name.strip(),
                    last_name=request.last_name.strip(),
                    role=request.role,
                    is_active=request.is_active,
                )
            )

        logger.info("user_created", user_id=user.id, role=user.role.value)
        return user

    def to_response(self, user: User) -> UserResponse:
        return user_to_response(user)
