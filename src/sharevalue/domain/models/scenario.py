"""What-if scenario domain model."""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional

from sharevalue.core.timezone import parse_datetime_utc


def _optional_number(value: Any) -> Optional[float]:
    """Blank, non-numeric or non-finite overrides are stored as None."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


@dataclass
class WhatIfScenario:
    """
    User-defined alternative valuation inputs.

    When use_live_price / use_live_rate is False the custom value replaces the
    live one. A missing custom value counts as zero in valuations.
    """

    id: str
    name: str
    order: int
    use_live_price: bool = True
    use_live_rate: bool = True
    custom_price: Optional[float] = None
    custom_rate: Optional[float] = None
    created_at: Optional[datetime] = field(default=None)
    updated_at: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        self.custom_price = _optional_number(self.custom_price)
        self.custom_rate = _optional_number(self.custom_rate)

    def copy(self, **changes: Any) -> "WhatIfScenario":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            "use_live_price": self.use_live_price,
            "use_live_rate": self.use_live_rate,
            "custom_price": self.custom_price,
            "custom_rate": self.custom_rate,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "WhatIfScenario":
        """Rebuild a scenario from its persisted form. Raises KeyError/ValueError if unusable."""
        created_at = data.get("created_at")
        updated_at = data.get("updated_at")
        return WhatIfScenario(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            order=int(data["order"]),
            use_live_price=bool(data.get("use_live_price", True)),
            use_live_rate=bool(data.get("use_live_rate", True)),
            custom_price=data.get("custom_price"),
            custom_rate=data.get("custom_rate"),
            created_at=parse_datetime_utc(created_at) if created_at else None,
            updated_at=parse_datetime_utc(updated_at) if updated_at else None,
        )
