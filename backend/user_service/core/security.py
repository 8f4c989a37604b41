from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt ignores everything past this many bytes of input
PASSWORD_MAX_BYTES = 72


def _exceeds_bcrypt_limit(password: str) -> bool:
    return len(password.encode("utf-8")) > PASSWORD_MAX_BYTES


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext against a stored hash; over-long input never matches"""
    if _exceeds_bcrypt_limit(plain_password):
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a plaintext password

    Raises:
        ValueError: If the password is longer than bcrypt can hash without truncation
    """
    if _exceeds_bcrypt_limit(password):
        raise ValueError(f"password exceeds {PASSWORD_MAX_BYTES} bytes")
    return pwd_context.hash(password)
