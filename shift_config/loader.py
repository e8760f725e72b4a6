"""
Configuration Loader (``shift_config.loader``).

Responsibility
--------------
Loads a settlement policy YAML file and parses it into the frozen
``SettlementPolicy`` dataclass.  The public runtime entrypoint is
``shift_config.get_settlement_policy()``.

Invariants enforced
-------------------
* Parse errors raise ``ConfigurationError`` with the offending field name;
  a policy that would settle nonsensically is rejected at load time.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from shift_config.schema import SettlementPolicy
from shift_engines.settlement import PaymentMode
from shift_kernel.domain.numeric import to_decimal
from shift_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _parse_decimal(data: dict[str, Any], key: str, default: Decimal) -> Decimal:
    if key not in data or data[key] is None:
        return default
    value = to_decimal(data[key])
    if value is None:
        raise ConfigurationError(key, f"not a number: {data[key]!r}")
    return value


def parse_policy(data: dict[str, Any]) -> SettlementPolicy:
    """
    Parse a ``SettlementPolicy`` from a dict.

    Preconditions:
        - ``data`` contains ``policy_id`` and ``version``.
    Raises:
        ConfigurationError: missing identity fields, a negative or
            zero-sum default split, an unknown payment mode, or a
            non-positive hours limit.
    """
    section = data.get("settlement", data)

    policy_id = section.get("policy_id")
    if not policy_id:
        raise ConfigurationError("policy_id", "required")
    try:
        version = int(section.get("version"))
    except (TypeError, ValueError):
        raise ConfigurationError("version", "must be an integer") from None

    percent_master = _parse_decimal(section, "default_percent_master", Decimal("60"))
    percent_salon = _parse_decimal(section, "default_percent_salon", Decimal("40"))
    if percent_master < 0 or percent_salon < 0:
        raise ConfigurationError("default_percent_master", "percentages must be >= 0")
    if percent_master + percent_salon <= 0:
        raise ConfigurationError("default_percent_master", "percentages must sum to > 0")

    payment_mode = str(section.get("default_payment_mode", PaymentMode.PERCENT_WITH_GUARANTEE.value))
    if payment_mode not in {m.value for m in PaymentMode}:
        raise ConfigurationError("default_payment_mode", f"unknown mode {payment_mode!r}")

    max_hours = _parse_decimal(section, "max_corrected_hours", Decimal("48"))
    if max_hours <= 0:
        raise ConfigurationError("max_corrected_hours", "must be > 0")

    return SettlementPolicy(
        policy_id=str(policy_id),
        version=version,
        default_percent_master=percent_master,
        default_percent_salon=percent_salon,
        default_payment_mode=payment_mode,
        max_corrected_hours=max_hours,
        currency=str(section.get("currency", "KGS")),
        checksum=compute_checksum(section),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
