import sys
from pathlib import Path

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

KEY_ID = "2X9R4HXF34"
ISSUER_ID = "57246542-96fe-1a63-e053-0824d011072a"
BUNDLE_ID = "com.example.storekit"


@pytest.fixture(scope="session")
def ec_private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def signing_key_pem(ec_private_key):
    return ec_private_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()).decode()


@pytest.fixture
def make_client(signing_key_pem):
    """
    Build a client whose requests go to ``handler`` through an httpx.MockTransport.
    """
    from storekit.clients.app_store_client import AppStoreServerAPIClient
    from storekit.config import Environment

    def _make(handler, environment=Environment.SANDBOX, **kwargs):
        return AppStoreServerAPIClient(
            signing_key=signing_key_pem,
            key_id=KEY_ID,
            issuer_id=ISSUER_ID,
            bundle_id=BUNDLE_ID,
            environment=environment,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make
