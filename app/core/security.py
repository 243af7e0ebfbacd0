import logging
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

from app.core.config import SECRET_KEY, ALGORITHM
from app.core.errors import ForbiddenError

logger = logging.getLogger(__name__)


class JWTIdentityVerifier:
    """
    Verify bearer JWTs issued by the identity provider.

    The ``sub`` claim is the stable user id that documents and shares are
    keyed by.
    """

    def __init__(self, secret_key: str = SECRET_KEY, algorithm: str = ALGORITHM):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def verify(self, token: str) -> str:
        """
        Return the user id carried by ``token``.

        Raises:
            ForbiddenError: If the token is expired, tampered with or has no subject
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise ForbiddenError("Unauthorized: Invalid token.", code="invalid_token")

        user_id = payload.get("sub")
        if not user_id:
            logger.warning("Rejected bearer token without subject")
            raise ForbiddenError("Unauthorized: Invalid token.", code="invalid_token")
        return str(user_id)


def create_access_token(data: dict, expires_delta: timedelta = None,
                        secret_key: str = SECRET_KEY, algorithm: str = ALGORITHM) -> str:
    """Issue a token. Used by tests and local tooling; production tokens come from the identity provider."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)
