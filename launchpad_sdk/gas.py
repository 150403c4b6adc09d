"""
Gas limit policy for user operations.

Bundler estimates on the supported rollups run low under real throughput,
so every estimated field gets a fixed percentage margin and every missing
field gets an action-specific floor.
"""
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from .models import GasEnvelope, GasEstimate

GAS_FIELDS = ("call_gas_limit", "verification_gas_limit", "pre_verification_gas")


class ActionKind(str, Enum):
    """Kinds of user operation the orchestrator submits."""
    DEPLOY = "deploy"
    MINT = "mint"
    TRANSFER = "transfer"
    RECORD = "record"


DEFAULT_MARGIN_PERCENT = 30

DEFAULT_FLOORS: Dict[ActionKind, Dict[str, int]] = {
    ActionKind.DEPLOY: {
        "call_gas_limit": 500_000,
        "verification_gas_limit": 1_000_000,
        "pre_verification_gas": 800_000,
    },
    ActionKind.MINT: {
        "call_gas_limit": 400_000,
        "verification_gas_limit": 200_000,
        "pre_verification_gas": 100_000,
    },
    ActionKind.TRANSFER: {
        "call_gas_limit": 400_000,
        "verification_gas_limit": 1_000_000,
        "pre_verification_gas": 800_000,
    },
    ActionKind.RECORD: {
        "call_gas_limit": 200_000,
        "verification_gas_limit": 1_000_000,
        "pre_verification_gas": 800_000,
    },
}


class GasPolicy:
    """Turns a bundler estimate into the gas envelope that gets signed."""

    def __init__(
        self,
        margin_percent: int = DEFAULT_MARGIN_PERCENT,
        floors: Optional[Mapping[ActionKind, Mapping[str, int]]] = None
    ):
        if margin_percent < 0:
            raise ValueError("margin_percent must be non-negative")
        self.margin_percent = margin_percent
        self.floors = {kind: dict(values) for kind, values in (floors or DEFAULT_FLOORS).items()}

    def floor_for(self, action_kind: ActionKind) -> GasEnvelope:
        """Return the floor envelope for an action kind"""
        return GasEnvelope(**self.floors_dict(action_kind))

    def bump(self, estimate: int) -> int:
        """Add the safety margin to a single estimate (integer, rounding down)"""
        return estimate + estimate * self.margin_percent // 100

    def adjust(
        self,
        estimate: Union[GasEstimate, GasEnvelope, Mapping[str, Optional[int]], None],
        action_kind: ActionKind
    ) -> GasEnvelope:
        """
        Compute the gas envelope for a prepared operation

        Args:
            estimate: Bundler estimate; fields may be absent or zero
            action_kind: Kind of action, selects the floors

        Returns:
            GasEnvelope with every field margined or floored
        """
        floors = self.floors_dict(action_kind)

        if estimate is None:
            values: Mapping[str, Optional[int]] = {}
        elif isinstance(estimate, (GasEstimate, GasEnvelope)):
            values = estimate.model_dump()
        else:
            values = estimate

        adjusted = {}
        for name in GAS_FIELDS:
            raw = values.get(name)
            if raw:
                adjusted[name] = self.bump(int(raw))
            else:
                adjusted[name] = floors[name]
        return GasEnvelope(**adjusted)

    def floors_dict(self, action_kind: ActionKind) -> Dict[str, int]:
        try:
            return self.floors[ActionKind(action_kind)]
        except (KeyError, ValueError):
            raise ValueError(f"No gas floors configured for {action_kind!r}")
