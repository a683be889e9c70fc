import argparse
import asyncio
import sys
from typing import Optional, Sequence

from storekit.clients.app_store_client import AppStoreServerAPIClient
from storekit.config import Environment, settings
from storekit.exceptions import APIException, StoreKitError


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the signed transaction info for a transaction id.")
    parser.add_argument("transaction_id")
    parser.add_argument(
        "--environment",
        choices=[e.value for e in Environment],
        default=None,
        help="overrides ENVIRONMENT from the settings",
    )
    return parser.parse_args(argv)


async def lookup(transaction_id: str, environment: Optional[str] = None) -> int:
    if not settings.credentials_configured():
        print("SIGNING_KEY, KEY_ID, ISSUER_ID and BUNDLE_ID must be set", file=sys.stderr)
        return 2
    try:
        client = AppStoreServerAPIClient(
            signing_key=settings.signing_key.get_secret_value(),
            key_id=settings.key_id,
            issuer_id=settings.issuer_id,
            bundle_id=settings.bundle_id,
            environment=environment or settings.environment,
            timeout=settings.request_timeout_seconds,
        )
        info = await client.get_transaction_info(transaction_id)
    except APIException as exc:
        print(f"status={exc.http_status_code} errorCode={exc.api_error} errorMessage={exc.error_message}", file=sys.stderr)
        return 1
    except StoreKitError as exc:
        print(f"{exc.__class__.__name__}: {exc}", file=sys.stderr)
        return 2
    print(info.signedTransactionInfo)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    return asyncio.run(lookup(args.transaction_id, args.environment))


if __name__ == "__main__":
    raise SystemExit(main())
