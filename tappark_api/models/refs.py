"""Tagged variants for what a reservation targets and who occupies it."""
from dataclasses import dataclass
from typing import Optional
import uuid

SPOT = 'spot'
SECTION = 'section'


@dataclass(frozen=True)
class SpotRef:
    spot_id: uuid.UUID
    kind = SPOT


@dataclass(frozen=True)
class SectionRef:
    section_id: uuid.UUID
    kind = SECTION


@dataclass(frozen=True)
class Registered:
    user_id: uuid.UUID


@dataclass(frozen=True)
class Guest:
    name: str
    contact: Optional[str] = None
    plate_number: Optional[str] = None
