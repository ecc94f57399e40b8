from __future__ import annotations

import json
from pathlib import Path
from typing import Any

LIBS_DIR = Path(__file__).resolve().parents[2] / "libs"
LIBS_NETWORKS_DIR = LIBS_DIR / "networks"


def load_network_json(network: str) -> dict[str, Any]:
    """
    Loads a per-network registry configuration from libs/networks/<network>.json.

    Example:
      load_network_json("avalanche")
    """
    name = (network or "").strip().lower()
    if not name or not name.replace("_", "").replace("-", "").isalnum():
        raise ValueError(f"Invalid network name: {network!r}")

    p = LIBS_NETWORKS_DIR / f"{name}.json"
    if not p.exists():
        raise FileNotFoundError(f"Network config not found: {p}")
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected network JSON object in {p}, got {type(data).__name__}")
    return data


def available_networks() -> list[str]:
    if not LIBS_NETWORKS_DIR.exists():
        return []
    return sorted(p.stem for p in LIBS_NETWORKS_DIR.glob("*.json"))
