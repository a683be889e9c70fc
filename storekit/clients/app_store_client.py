from typing import Optional, Union

import httpx
from pydantic import ValidationError

from storekit.config import TRANSACTION_INFO_PATH, Credentials, Environment, environment_base_url_map
from storekit.exceptions import InvalidArgument, MalformedResponse, NetworkError
from storekit.helpers import api_exception_from_response, read_json, validate_transaction_id
from storekit.logging_config import get_logger
from storekit.schemas.api_schemas import TransactionInfoResponse
from storekit.security import sign_token

logger = get_logger(__name__)

USER_AGENT = "storekit-lookup/0.1.0"

# Sentinel for "use the client default" so that None can mean "no timeout".
_DEFAULT = object()


class AppStoreServerAPIClient:
    def __init__(
        self,
        signing_key: str,
        key_id: str,
        issuer_id: str,
        bundle_id: str,
        environment: Union[Environment, str],
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        try:
            self.credentials = Credentials(
                signing_key=signing_key,
                key_id=key_id,
                issuer_id=issuer_id,
                bundle_id=bundle_id,
            )
        except ValidationError as exc:
            raise InvalidArgument("signing key, key id, issuer id and bundle id are all required") from exc
        try:
            self.environment = Environment(environment)
        except ValueError as exc:
            raise InvalidArgument(f"unknown environment: {environment!r}") from exc
        self.base_url = environment_base_url_map[self.environment]
        self.timeout = timeout
        self._transport = transport

    def _new_http_client(self, timeout: Optional[float]) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=self._transport,
        )

    async def get_transaction_info(self, transaction_id: str, timeout=_DEFAULT) -> TransactionInfoResponse:
        """
        Fetch the signed transaction record for ``transaction_id``.

        Every call signs its own token and sends exactly one request; nothing
        is retried. ``timeout`` overrides the client budget for this call.
        """
        validate_transaction_id(transaction_id)
        token = sign_token(
            self.credentials.signing_key,
            self.credentials.key_id,
            self.credentials.issuer_id,
            self.credentials.bundle_id,
        )
        path = TRANSACTION_INFO_PATH.format(transaction_id=transaction_id)
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        request_timeout = self.timeout if timeout is _DEFAULT else timeout

        async with self._new_http_client(request_timeout) as client:
            try:
                resp = await client.get(path, headers=headers)
            except httpx.RequestError as exc:
                logger.warning(
                    "App Store request failed: environment=%s path=%s error=%s",
                    self.environment.value,
                    path,
                    exc.__class__.__name__,
                )
                raise NetworkError(f"App Store request error: {exc.__class__.__name__}: {exc}") from exc

        logger.info(
            "App Store response: environment=%s path=%s status=%s",
            self.environment.value,
            path,
            resp.status_code,
        )
        if 200 <= resp.status_code < 300:
            return self._parse_transaction_info(resp)
        raise api_exception_from_response(resp)

    @staticmethod
    def _parse_transaction_info(resp: httpx.Response) -> TransactionInfoResponse:
        body = read_json(resp)
        if not isinstance(body, dict):
            raise MalformedResponse("response body is not a JSON object", status_code=resp.status_code)
        try:
            return TransactionInfoResponse.model_validate(body)
        except ValidationError as exc:
            raise MalformedResponse(
                "response body has no signedTransactionInfo string",
                status_code=resp.status_code,
            ) from exc
