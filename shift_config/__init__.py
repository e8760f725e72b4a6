"""
shift_config -- single public entrypoint for settlement configuration.

Responsibility:
    Provides the ONLY way to obtain the settlement policy at runtime
    through ``get_settlement_policy()``.  YAML loading is internal.

Architecture position:
    Configuration -- sits above ``shift_kernel`` and ``shift_engines``.
    The kernel and the engines MUST NEVER import from ``shift_config``;
    the settlement service receives a ``SettlementPolicy`` by injection.

Audit relevance:
    Every successful ``get_settlement_policy()`` call emits a
    ``SHIFT_CONFIG_TRACE`` log entry with the policy id, version and
    checksum, tying every settled shift to the policy that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from shift_config.loader import load_yaml_file, parse_policy
from shift_config.schema import SettlementPolicy

_logger = logging.getLogger("shift_kernel.config")

_DEFAULT_POLICY_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_settlement_policy(path: Path | str | None = None) -> SettlementPolicy:
    """Load, validate and trace the settlement policy.

    Args:
        path: YAML file to load.  Defaults to the bundled ``sets/default.yaml``.

    Raises:
        FileNotFoundError: the file does not exist.
        ConfigurationError: the file holds invalid values.
    """
    policy_path = Path(path) if path is not None else _DEFAULT_POLICY_PATH
    policy = parse_policy(load_yaml_file(policy_path))

    _logger.info(
        "SHIFT_CONFIG_TRACE",
        extra={
            "trace_type": "SHIFT_CONFIG_TRACE",
            "policy_id": policy.policy_id,
            "policy_version": policy.version,
            "checksum": policy.checksum,
            "source": str(policy_path),
        },
    )
    return policy


__all__ = ["SettlementPolicy", "get_settlement_policy"]
