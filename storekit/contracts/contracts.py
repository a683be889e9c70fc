from pydantic import BaseModel, StrictInt

from storekit.config import TOKEN_ALGORITHM, TOKEN_AUDIENCE, TOKEN_TTL_SECONDS, Credentials


class TokenHeader(BaseModel):
    alg: str = TOKEN_ALGORITHM
    kid: str
    typ: str = "JWT"

    @classmethod
    def from_credentials(cls, credentials: Credentials) -> "TokenHeader":
        return cls(kid=credentials.key_id)


class TokenClaims(BaseModel):
    iss: str
    iat: StrictInt
    exp: StrictInt
    aud: str = TOKEN_AUDIENCE
    bid: str

    @classmethod
    def from_credentials(cls, credentials: Credentials, issued_at: int) -> "TokenClaims":
        return cls(
            iss=credentials.issuer_id,
            iat=issued_at,
            exp=issued_at + TOKEN_TTL_SECONDS,
            bid=credentials.bundle_id,
        )
