"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification for user sign-up and login.
Uses bcrypt directly; passwords are never stored in plain text.
"""

import bcrypt

# bcrypt 비용 계수 — 기존 계정 해시와 동일 (Matches hashes of existing accounts)
_BCRYPT_ROUNDS: int = 10


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다.

    Hash a plain text password using bcrypt with a random salt.

    Args:
        password: 평문 비밀번호 (Plain text password to hash)

    Returns:
        str: bcrypt 해시 문자열 (Bcrypt hash string, ~60 chars)
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 bcrypt 해시를 비교 검증합니다.

    Args:
        plain_password: 검증할 평문 비밀번호 (Plain text password to verify)
        hashed_password: 저장된 bcrypt 해시 (Stored bcrypt hash)

    Returns:
        bool: 일치하면 True (True if password matches hash)
    """
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )
