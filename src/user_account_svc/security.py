import logging

import jwt
from passlib.context import CryptContext

from user_account_svc.exceptions import InvalidTokenError

DEFAULT_BCRYPT_ROUNDS = 10


class PasswordHasher:
    """
    Hashes and verifies passwords with bcrypt through passlib.

    Every call to `hash` draws a fresh salt, so hashing the same password twice
    yields two different digests that both verify.
    """

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain_password: str) -> str:
        return self._context.hash(plain_password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plain password against its hashed version.

        Returns False instead of raising when the digest is malformed.
        """
        try:
            return self._context.verify(plain_password, hashed_password)
        except Exception as e:
            logging.error(e, exc_info=True)
            return False


class TokenIssuer:
    """
    Signs bearer tokens carrying a user's id.

    The payload is exactly ``{"id": <user id>}``: no expiry, issuer or audience
    claims, so a given id and secret always produce the same token.
    """

    ALGORITHM = "HS256"

    def __init__(self, secret_key: str):
        if not secret_key:
            raise ValueError("Token secret key cannot be empty")
        self._secret_key = secret_key

    def issue(self, user_id: str) -> str:
        return jwt.encode({"id": str(user_id)}, self._secret_key, algorithm=self.ALGORITHM)

    def decode(self, token: str) -> str:
        """Return the user id embedded in a token signed with this issuer's secret."""
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.ALGORITHM])
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e)) from e
        if "id" not in payload:
            raise InvalidTokenError("Token has no id claim")
        return payload["id"]
