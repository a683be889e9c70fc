from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse

from storekit.clients.app_store_client import AppStoreServerAPIClient
from storekit.config import settings
from storekit.exceptions import APIException, StoreKitError
from storekit.logging_config import get_logger
from storekit.security import require_service_token


logger = get_logger(__name__)

app = FastAPI(title="StoreKit Transaction Lookup")


def get_api_client() -> AppStoreServerAPIClient:
    if not settings.credentials_configured():
        logger.error("App Store credentials are missing from the environment")
        raise HTTPException(status_code=500, detail="App Store credentials are not configured")
    return AppStoreServerAPIClient(
        signing_key=settings.signing_key.get_secret_value(),
        key_id=settings.key_id,
        issuer_id=settings.issuer_id,
        bundle_id=settings.bundle_id,
        environment=settings.environment,
        timeout=settings.request_timeout_seconds,
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/transactions/{transaction_id}")
async def transaction_info_route(
    transaction_id: str,
    _auth=Depends(require_service_token),
    api_client: AppStoreServerAPIClient = Depends(get_api_client),
):
    try:
        info = await api_client.get_transaction_info(transaction_id)
    except APIException as exc:
        logger.warning(
            "App Store rejected lookup: transactionId=%s status=%s errorCode=%s",
            transaction_id,
            exc.http_status_code,
            exc.api_error,
        )
        # redirects are not followed; 3xx upstream answers surface as 502
        status_code = exc.http_status_code if exc.http_status_code >= 400 else 502
        return JSONResponse(
            status_code=status_code,
            content={"errorCode": exc.api_error, "errorMessage": exc.error_message},
        )
    except StoreKitError as exc:
        logger.error(
            "Transaction lookup failed: transactionId=%s error=%s",
            transaction_id,
            exc.__class__.__name__,
        )
        return JSONResponse(status_code=500, content={"detail": "internal error"})
    return info.model_dump()
