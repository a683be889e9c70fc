import logging
import os
from typing import Dict

import jwt
from fastapi import FastAPI, Header, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("mock-appstore")

app = FastAPI(title="Mock App Store Server API")

EXPECTED_AUDIENCE = "appstoreconnect-v1"
EXPECTED_BUNDLE_ID = os.getenv("MOCK_BUNDLE_ID")

# transactionId -> signedTransactionInfo
TRANSACTIONS: Dict[str, str] = {
    "2000000000000001": "eyJhbGciOiJFUzI1NiJ9.eyJ0cmFuc2FjdGlvbklkIjoiMjAwMDAwMDAwMDAwMDAwMSJ9.c2ln",
}


class SeedTransaction(BaseModel):
    transactionId: str
    signedTransactionInfo: str


def _token_accepted(authorization: str | None) -> bool:
    if not authorization or not authorization.startswith("Bearer "):
        return False
    token = authorization.split(" ", 1)[1].strip()
    try:
        header = jwt.get_unverified_header(token)
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return False
    if header.get("alg") != "ES256" or not header.get("kid"):
        return False
    if claims.get("aud") != EXPECTED_AUDIENCE:
        return False
    if EXPECTED_BUNDLE_ID and claims.get("bid") != EXPECTED_BUNDLE_ID:
        return False
    return True


@app.get("/inApps/v1/transactions/{transaction_id}")
async def get_transaction_info(
    transaction_id: str,
    authorization: str | None = Header(None, alias="Authorization"),
):
    if not _token_accepted(authorization):
        logger.warning("Rejected lookup with a missing or invalid bearer token")
        # the real API answers 401 without a body
        return Response(status_code=401)
    if not transaction_id.isdigit():
        logger.info("Invalid transaction id=%s", transaction_id)
        return JSONResponse(
            status_code=400,
            content={"errorCode": 4000006, "errorMessage": "Invalid transaction id."},
        )
    signed = TRANSACTIONS.get(transaction_id)
    if signed is None:
        logger.info("Unknown transaction id=%s", transaction_id)
        return JSONResponse(
            status_code=404,
            content={"errorCode": 4040010, "errorMessage": "Transaction id not found."},
        )
    logger.info("Serving transaction id=%s", transaction_id)
    return {"signedTransactionInfo": signed}


@app.post("/admin/transactions")
async def seed_transaction(body: SeedTransaction):
    TRANSACTIONS[body.transactionId] = body.signedTransactionInfo
    logger.info("Seeded transaction id=%s", body.transactionId)
    return {"status": "stored"}
