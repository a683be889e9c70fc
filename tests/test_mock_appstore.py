import asyncio

import httpx
import pytest

from conftest import BUNDLE_ID, ISSUER_ID, KEY_ID
from storekit.clients.app_store_client import AppStoreServerAPIClient
from storekit.config import Environment
from storekit.exceptions import APIError, APIException


@pytest.fixture
def mock_appstore():
    import mock_appstore.main as mock_main

    saved = dict(mock_main.TRANSACTIONS)
    yield mock_main
    mock_main.TRANSACTIONS.clear()
    mock_main.TRANSACTIONS.update(saved)


@pytest.fixture
def asgi_client(mock_appstore, signing_key_pem):
    return AppStoreServerAPIClient(
        signing_key=signing_key_pem,
        key_id=KEY_ID,
        issuer_id=ISSUER_ID,
        bundle_id=BUNDLE_ID,
        environment=Environment.PRODUCTION,
        transport=httpx.ASGITransport(app=mock_appstore.app),
    )


def test_lookup_against_mock_server(asgi_client, mock_appstore):
    mock_appstore.TRANSACTIONS["2000000000000042"] = "header.payload.signature"

    result = asyncio.run(asgi_client.get_transaction_info("2000000000000042"))

    assert result.signedTransactionInfo == "header.payload.signature"


def test_unknown_transaction_against_mock_server(asgi_client):
    with pytest.raises(APIException) as exc_info:
        asyncio.run(asgi_client.get_transaction_info("2000000000009999"))

    assert exc_info.value.http_status_code == 404
    assert exc_info.value.api_error == 4040010
    assert exc_info.value.error_message == "Transaction id not found."


def test_invalid_transaction_id_against_mock_server(asgi_client):
    with pytest.raises(APIException) as exc_info:
        asyncio.run(asgi_client.get_transaction_info("not-a-number"))

    assert exc_info.value.http_status_code == 400
    assert exc_info.value.known_error is APIError.INVALID_TRANSACTION_ID


def test_mock_server_rejects_missing_token(mock_appstore):
    async def call():
        transport = httpx.ASGITransport(app=mock_appstore.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://mock-appstore") as client:
            return await client.get("/inApps/v1/transactions/2000000000000001")

    resp = asyncio.run(call())

    assert resp.status_code == 401
    assert resp.content == b""


def test_mock_server_seed_endpoint(mock_appstore, asgi_client):
    async def seed():
        transport = httpx.ASGITransport(app=mock_appstore.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://mock-appstore") as client:
            return await client.post(
                "/admin/transactions",
                json={"transactionId": "2000000000000077", "signedTransactionInfo": "a.b.c"},
            )

    assert asyncio.run(seed()).status_code == 200
    result = asyncio.run(asgi_client.get_transaction_info("2000000000000077"))
    assert result.signedTransactionInfo == "a.b.c"
