import secrets

from passlib.context import CryptContext

# pbkdf2 keeps the codes hashed at rest without the bcrypt backend.
otp_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def generate_otp() -> str:
    """6-digit code, uniform over 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


def hash_otp(code: str) -> str:
    return otp_context.hash(code)


def verify_otp(code: str, hashed: str) -> bool:
    return otp_context.verify(code, hashed)
