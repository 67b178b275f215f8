from __future__ import annotations

import re

_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")
_BYTES32 = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_account_address(value: str) -> bool:
    return bool(_ADDRESS.match(value or ""))


def is_root_hash(value: str) -> bool:
    return bool(_BYTES32.match(value or ""))
