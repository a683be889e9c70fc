from typing import Optional, Union

from pydantic import BaseModel, StrictStr


class TransactionInfoResponse(BaseModel):
    signedTransactionInfo: StrictStr


class ErrorPayload(BaseModel):
    errorCode: Optional[Union[int, str]] = None
    errorMessage: Optional[str] = None
