"""Tests for the per-network routing configuration."""

import pytest

from adapters.chain.artifacts import available_networks, load_network_json
from core.domain.schemas.network_config import NetworkConfig
from core.services.network_config import get_network_config
from core.use_cases.network_config_usecase import NetworkConfigUseCase

WAVAX = "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7"


def test_shipped_networks():
    assert set(available_networks()) >= {"avalanche", "arbitrum", "optimism", "mantle", "dogechain"}


@pytest.mark.parametrize("network", ["avalanche", "arbitrum", "optimism", "mantle", "dogechain"])
def test_every_network_file_is_valid(network):
    cfg = get_network_config(network)
    assert cfg.network == network
    assert cfg.adapter_whitelist
    assert cfg.hop_tokens


def test_avalanche_surface():
    cfg = get_network_config("avalanche")
    assert cfg.wnative.lower() == WAVAX.lower()
    assert "GmxAdapter" in cfg.adapter_whitelist
    assert set(cfg.minimal_adapter_whitelist)
    assert cfg.is_hop_token(WAVAX.lower())
    assert not cfg.is_hop_token("0x" + "00" * 20)


def test_config_is_cached():
    assert get_network_config("avalanche") is get_network_config("avalanche")


def test_invalid_network_name():
    with pytest.raises(ValueError):
        load_network_json("../secrets")
    with pytest.raises(FileNotFoundError):
        load_network_json("atlantis")


class TestFromDict:
    base = {
        "network": "testnet",
        "wnative": WAVAX,
        "adapter_whitelist": ["A", "B"],
        "hop_tokens": [{"symbol": "WAVAX", "address": WAVAX.lower()}],
    }

    def test_roundtrip_fields(self):
        cfg = NetworkConfig.from_dict(self.base)
        assert cfg.hop_tokens[0].address.lower() == WAVAX.lower()
        assert cfg.to_dict()["adapter_whitelist"] == ["A", "B"]
        assert cfg.minimal_adapter_whitelist == ()

    def test_duplicate_adapters_rejected(self):
        with pytest.raises(ValueError):
            NetworkConfig.from_dict({**self.base, "adapter_whitelist": ["A", "A"]})

    def test_empty_whitelist_rejected(self):
        with pytest.raises(ValueError):
            NetworkConfig.from_dict({**self.base, "adapter_whitelist": []})

    def test_bad_addresses_rejected(self):
        with pytest.raises(ValueError):
            NetworkConfig.from_dict({**self.base, "wnative": "0x1234"})
        with pytest.raises(ValueError):
            NetworkConfig.from_dict({**self.base, "hop_tokens": [{"symbol": "X", "address": "nope"}]})


class TestUseCase:
    def test_default_network(self):
        uc = NetworkConfigUseCase(default_network="avalanche")
        assert uc.get_network(None)["data"]["network"] == "avalanche"
        assert "arbitrum" in uc.list_networks()["data"]["networks"]

    def test_unknown_network(self):
        with pytest.raises(LookupError):
            NetworkConfigUseCase(default_network="avalanche").get_network("atlantis")

    def test_hop_token(self):
        res = NetworkConfigUseCase(default_network="avalanche").is_hop_token("avalanche", WAVAX)
        assert res["data"]["is_hop_token"] is True
