import hmac
import time
from typing import Optional, Union

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import load_pem_private_key
from fastapi import Header, HTTPException
from pydantic import ValidationError

from storekit.config import TOKEN_ALGORITHM, Credentials, settings
from storekit.contracts.contracts import TokenClaims, TokenHeader
from storekit.exceptions import SigningError


def load_signing_key(signing_key: Union[str, bytes]) -> ec.EllipticCurvePrivateKey:
    """
    Import PEM key material held in memory as a P-256 private key.
    """
    key_bytes = signing_key.encode() if isinstance(signing_key, str) else signing_key
    try:
        key = load_pem_private_key(key_bytes, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError("signing key is not an unencrypted PEM private key") from exc
    if not isinstance(key, ec.EllipticCurvePrivateKey) or not isinstance(key.curve, ec.SECP256R1):
        raise SigningError("signing key must be an EC private key on the P-256 curve")
    return key


def sign_token(
    signing_key: Union[str, bytes],
    key_id: str,
    issuer_id: str,
    bundle_id: str,
    issued_at: Optional[int] = None,
) -> str:
    """
    Mint a compact ES256 JWS bearer token for the App Store Server API.
    """
    if isinstance(signing_key, bytes):
        try:
            signing_key = signing_key.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SigningError("signing key bytes are not UTF-8 PEM text") from exc
    try:
        credentials = Credentials(
            signing_key=signing_key,
            key_id=key_id,
            issuer_id=issuer_id,
            bundle_id=bundle_id,
        )
    except ValidationError as exc:
        raise SigningError("token claims require a key, key id, issuer id and bundle id") from exc

    key = load_signing_key(credentials.signing_key)
    now = issued_at if issued_at is not None else int(time.time())
    header = TokenHeader.from_credentials(credentials)
    claims = TokenClaims.from_credentials(credentials, now)
    try:
        token = jwt.encode(
            claims.model_dump(),
            key,
            algorithm=TOKEN_ALGORITHM,
            headers=header.model_dump(),
        )
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise SigningError(f"could not sign token: {exc.__class__.__name__}") from exc
    # PyJWT 1.x returned bytes
    if isinstance(token, bytes):
        token = token.decode("utf-8")
    return token


def require_service_token(authorization: str | None = Header(None, alias="Authorization")):
    """
    Guard for the edge service: once SERVICE_BEARER_TOKEN is set, callers
    must present it as a Bearer credential.
    """
    expected = settings.service_bearer_token
    if not expected:
        return
    scheme, _, presented = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(presented.strip(), expected):
        raise HTTPException(status_code=401, detail="Unauthorized")
