from core.logger import get_logger
from core.security import hash_password
from models import Role, User

logger = get_logger("startup")


def create_default_admin(settings, alias: str):
    """Ensure the configured admin account exists so the service is usable without manual seeding."""
    email = settings.DEFAULT_ADMIN_EMAIL
    password = settings.DEFAULT_ADMIN_PASSWORD
    if not email or not password:
        return None

    admin = User.objects.using(alias)(email=email).first()
    if admin:
        if admin.role != Role.ADMIN.value:
            admin.role = Role.ADMIN.value
            admin.switch_db(alias)
            admin.save()
            logger.info("Promoted %s to admin", email)
        return admin

    admin = User(
        name=settings.DEFAULT_ADMIN_NAME,
        email=email,
        password_hash=hash_password(password),
        role=Role.ADMIN.value,
    )
    admin.switch_db(alias)
    admin.save()
    logger.info("Default admin %s created", email)
    return admin
