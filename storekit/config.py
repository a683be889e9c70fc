from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    signing_key: Optional[SecretStr] = None
    key_id: Optional[str] = None
    issuer_id: Optional[str] = None
    bundle_id: Optional[str] = None
    environment: str = "sandbox"
    request_timeout_seconds: float = 10.0
    service_bearer_token: Optional[str] = None

    def credentials_configured(self) -> bool:
        return all([self.signing_key, self.key_id, self.issuer_id, self.bundle_id])

settings = Settings()

class Environment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"

environment_base_url_map = {
    Environment.SANDBOX: "https://api.storekit-sandbox.itunes.apple.com",
    Environment.PRODUCTION: "https://api.storekit.itunes.apple.com",
}

TRANSACTION_INFO_PATH = "/inApps/v1/transactions/{transaction_id}"
TOKEN_AUDIENCE = "appstoreconnect-v1"
TOKEN_ALGORITHM = "ES256"
TOKEN_TTL_SECONDS = 300


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    signing_key: str = Field(..., min_length=1, repr=False)
    key_id: str = Field(..., min_length=1)
    issuer_id: str = Field(..., min_length=1)
    bundle_id: str = Field(..., min_length=1)
