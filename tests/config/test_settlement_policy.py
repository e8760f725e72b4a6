"""Tests for settlement policy loading and validation."""

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from shift_config import get_settlement_policy
from shift_config.loader import compute_checksum, parse_policy
from shift_kernel.exceptions import ConfigurationError


def _write_policy(tmp_path: Path, **settlement) -> Path:
    body = {"policy_id": "salon-a", "version": 2}
    body.update(settlement)
    path = tmp_path / "policy.yaml"
    path.write_text(yaml.safe_dump({"settlement": body}))
    return path


class TestBundledPolicy:
    """The default policy shipped with the package."""

    def test_default_policy(self):
        policy = get_settlement_policy()

        assert policy.policy_id == "default"
        assert policy.version == 1
        assert policy.default_percent_master == Decimal("60")
        assert policy.default_percent_salon == Decimal("40")
        assert policy.default_payment_mode == "percent_with_guarantee"
        assert policy.max_corrected_hours == Decimal("48")
        assert len(policy.checksum) == 64

    def test_config_trace_logged(self, captured_logs):
        policy = get_settlement_policy()
        traces = [r for r in captured_logs() if r["message"] == "SHIFT_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["policy_id"] == "default"
        assert traces[0]["checksum"] == policy.checksum


class TestPolicyFile:
    """Policies loaded from custom YAML files."""

    def test_custom_values(self, tmp_path):
        path = _write_policy(
            tmp_path,
            default_percent_master=70,
            default_percent_salon=30,
            default_payment_mode="percent_only",
            max_corrected_hours=24,
            currency="USD",
        )
        policy = get_settlement_policy(path)

        assert policy.policy_id == "salon-a"
        assert policy.version == 2
        assert policy.default_percent_master == Decimal("70")
        assert policy.default_payment_mode == "percent_only"
        assert policy.max_corrected_hours == Decimal("24")
        assert policy.currency == "USD"

    def test_omitted_values_use_defaults(self, tmp_path):
        policy = get_settlement_policy(_write_policy(tmp_path))
        assert policy.default_percent_master == Decimal("60")
        assert policy.default_percent_salon == Decimal("40")
        assert policy.currency == "KGS"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_settlement_policy(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("settlement: [unclosed")
        with pytest.raises(yaml.YAMLError):
            get_settlement_policy(path)


class TestParsePolicyValidation:
    """Invalid policies are rejected at load time."""

    @pytest.mark.parametrize(
        "data, field",
        [
            ({"version": 1}, "policy_id"),
            ({"policy_id": "p", "version": "one"}, "version"),
            ({"policy_id": "p", "version": 1, "default_percent_master": "lots"}, "default_percent_master"),
            ({"policy_id": "p", "version": 1, "default_percent_salon": -5}, "default_percent_master"),
            (
                {"policy_id": "p", "version": 1, "default_percent_master": 0, "default_percent_salon": 0},
                "default_percent_master",
            ),
            ({"policy_id": "p", "version": 1, "default_payment_mode": "hourly"}, "default_payment_mode"),
            ({"policy_id": "p", "version": 1, "max_corrected_hours": 0}, "max_corrected_hours"),
        ],
    )
    def test_invalid(self, data, field):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_policy({"settlement": data})
        assert exc_info.value.code == "CONFIG_INVALID"
        assert exc_info.value.field == field

    def test_unwrapped_section_accepted(self):
        policy = parse_policy({"policy_id": "flat", "version": 3})
        assert policy.policy_id == "flat"
        assert policy.version == 3


class TestChecksum:
    """Configuration identity."""

    def test_key_order_irrelevant(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_value_change_detected(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})
