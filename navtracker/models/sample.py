"""Time-series sample models."""

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from navtracker.services.derived import compute_difference


class Sample(BaseModel):
    """One timestamped NAV / price reading."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    nav: float = Field(allow_inf_nan=False)
    price: float = Field(allow_inf_nan=False)

    @computed_field
    @property
    def difference(self) -> float:
        """NAV minus price, rounded to cents."""
        return compute_difference(self.nav, self.price)


class SessionStatus(str, Enum):
    """Session state machine states."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    MOCK = "mock"


class SessionSnapshot(BaseModel):
    """Read-only view handed to the rendering layer."""

    model_config = ConfigDict(frozen=True)

    samples: Tuple[Sample, ...] = ()
    status: SessionStatus = SessionStatus.IDLE
    last_error: Optional[str] = None
    using_mock_data: bool = False
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def latest(self) -> Optional[Sample]:
        return self.samples[-1] if self.samples else None
