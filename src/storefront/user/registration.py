"""User registration: command and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.exceptions import BadRequest, ErrorCode
from storefront.user.repository import normalize_email
from storefront.user.user import User
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="User")
class RegisterUser:
    """Create an account. The password arrives already hashed."""

    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    password_hash: String(required=True, max_length=255)


@storefront.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        email = normalize_email(command.email)
        if repo.find_by_email(email) is not None:
            raise BadRequest("User already exists", ErrorCode.USER_ALREADY_EXIST)

        user = User.register(
            name=command.name,
            email=email,
            password_hash=command.password_hash,
        )
        repo.add(user)
        logger.info("user_registered", user_id=str(user.id))
        return str(user.id)
