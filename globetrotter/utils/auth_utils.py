import json
import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt
import requests
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from globetrotter.config.config import settings
from globetrotter.utils.exceptions import InvalidTokenException, TokenExpiredException


logger = logging.getLogger(__name__)


def cognito_issuer() -> str:
    return f"https://cognito-idp.{settings.cognito_region}.amazonaws.com/{settings.cognito_user_pool_id}"


class ThreadSafeJWKSClient:
    """Thread-safe client for fetching and caching AWS Cognito public keys."""

    def __init__(self, cache_duration: timedelta = timedelta(hours=24)):
        self._public_keys: Optional[Dict[str, Any]] = None
        self._keys_last_updated: Optional[datetime] = None
        self._lock = threading.Lock()
        self._cache_duration = cache_duration

    def get_cognito_public_keys(self) -> Dict[str, Any]:
        """
        Fetch the user pool's JWKS, cached for `cache_duration`.

        Returns:
            Dict[str, Any]: Mapping of key id to JWK.

        Raises:
            HTTPException: 500 if the keys cannot be fetched.
        """
        with self._lock:
            if self._public_keys and self._keys_last_updated:
                if datetime.now() - self._keys_last_updated < self._cache_duration:
                    return self._public_keys

            try:
                response = requests.get(f"{cognito_issuer()}/.well-known/jwks.json", timeout=10)
                response.raise_for_status()
                keys = response.json()["keys"]
            except (requests.RequestException, KeyError, ValueError) as e:
                logger.error(f"Failed to fetch Cognito public keys: {e}")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to fetch authentication keys"
                )

            self._public_keys = {key["kid"]: key for key in keys}
            self._keys_last_updated = datetime.now()
            logger.info("Successfully fetched and cached Cognito public keys")
            return self._public_keys


jwks_client = ThreadSafeJWKSClient()


def decode_cognito_token(token: str, token_type: str = "access") -> Dict[str, Any]:
    """
    Decode and validate an AWS Cognito JWT.

    Checks the signature against the pool's public keys, the expiry, the
    `token_use` claim, the issuer, and for ID tokens the audience.

    Args:
        token (str): JWT token string.
        token_type (str, optional): 'access' or 'id'. Defaults to "access".

    Returns:
        Dict[str, Any]: The verified claims.

    Raises:
        TokenExpiredException: If the token has expired.
        InvalidTokenException: If the token fails any other check.
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except jwt.PyJWTError:
        raise InvalidTokenException()

    kid = unverified_header.get("kid")
    if not kid:
        raise InvalidTokenException("Invalid token: missing key ID")

    public_keys = jwks_client.get_cognito_public_keys()
    if kid not in public_keys:
        raise InvalidTokenException("Invalid token: key not found")

    key = jwt.algorithms.RSAAlgorithm.from_jwk(json.dumps(public_keys[kid]))

    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.cognito_client_id if token_type == "id" else None,
            issuer=cognito_issuer(),
            options={"verify_aud": token_type == "id"},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredException()
    except jwt.PyJWTError as e:
        logger.warning(f"JWT decode error: {type(e).__name__}")
        raise InvalidTokenException()

    if payload.get("token_use", "").lower() != token_type:
        raise InvalidTokenException("Invalid token: wrong token type")

    return payload


# Security scheme for protected endpoints
security = HTTPBearer(auto_error=False)


def get_current_user_id(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> str:
    """
    Resolve the caller's user id (the `sub` claim) from the bearer access token.

    Raises:
        HTTPException: 401 if the token is missing or invalid.
    """
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = decode_cognito_token(credentials.credentials, token_type="access")
    user_id = claims.get("sub")
    if not user_id:
        raise InvalidTokenException("Invalid token: missing subject")
    return user_id
