"""
Wallet document encoding.

A wallet file is a JSON object:

    {
      "balance": 150.0,
      "operations": [
        {"id": "...", "type": "INCOME", "amount": 200.0, "category": "salary",
         "description": "", "timestamp": "2024-05-01T10:00:00+00:00",
         "fromUser": null, "toUser": "alice"},
        ...
      ],
      "budgets": {"food": {"category": "food", "limit": 300.0}}
    }

Amounts are JSON numbers when a float holds them exactly and decimal strings
otherwise; both forms are read back without rounding. Timestamps are written
as ISO-8601; numeric epoch seconds are accepted on read.
"""

import json
from decimal import Decimal
from typing import Union

from pydantic import TypeAdapter, ValidationError

from finance_manager.models.wallet import WalletState
from finance_manager.services.storage.interface import UnsupportedWalletFormatError


_credentials_adapter = TypeAdapter(dict[str, str])


def encode_wallet(wallet: WalletState) -> str:
    """Serialize a wallet to its JSON document."""
    return json.dumps(wallet.to_storage_dict(), indent=2, ensure_ascii=False)


def decode_wallet(payload: Union[str, bytes]) -> WalletState:
    """
    Parse a JSON document into a wallet.

    Raises:
        UnsupportedWalletFormatError: If the payload is not valid JSON, does not
            have the wallet structure, or is internally inconsistent
            (balance vs. operations, budget keys vs. categories)
    """
    try:
        document = json.loads(payload, parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise UnsupportedWalletFormatError(f"Wallet document is not valid JSON: {e}") from e

    try:
        return WalletState.model_validate(document)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()[:5]
        )
        raise UnsupportedWalletFormatError(
            f"Unsupported wallet structure ({e.error_count()} problems): {problems}"
        ) from e


def encode_credentials(credentials: dict[str, str]) -> str:
    return json.dumps(dict(sorted(credentials.items())), indent=2, ensure_ascii=False)


def decode_credentials(payload: Union[str, bytes]) -> dict[str, str]:
    """Parse the credentials document. Raises ValidationError on bad content."""
    return _credentials_adapter.validate_json(payload)
