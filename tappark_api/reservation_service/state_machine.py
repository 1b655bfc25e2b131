"""Reservation lifecycle: reserved -> active -> completed, or reserved -> completed.

Each transition pairs the reservation row update with exactly one resource
update (spot status or section counters) inside the same transaction. Every
row update is conditioned on the expected prior status so a stale or duplicate
request affects zero rows and is reported instead of silently ignored.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import case

from tappark_api.db.db import db, transaction
from tappark_api.models.base import utcnow
from tappark_api.models.parking_section import ParkingSection
from tappark_api.models.parking_spot import ParkingSpot
from tappark_api.models.refs import SPOT
from tappark_api.models.reservation import Reservation, RESERVED, ACTIVE, COMPLETED
from tappark_api.reservation_service.errors import (
    AlreadyConfirmed,
    ReservationNotFound,
    StaleTransition,
)

logger = logging.getLogger(__name__)

STAFF_ROLES = ('Attendant', 'Admin')


@dataclass(frozen=True)
class Transition:
    name: str
    source: str
    target: str
    timestamp_field: str
    spot_from: str
    spot_to: str
    counter_deltas: tuple
    stale_error: type = StaleTransition


CONFIRM = Transition(
    'confirm', RESERVED, ACTIVE, 'start_time',
    spot_from='reserved', spot_to='occupied',
    counter_deltas=(('reserved_count', -1), ('parked_count', 1)),
    stale_error=AlreadyConfirmed,
)
END = Transition(
    'end', ACTIVE, COMPLETED, 'end_time',
    spot_from='occupied', spot_to='available',
    counter_deltas=(('parked_count', -1),),
)
RELEASE = Transition(
    'release', RESERVED, COMPLETED, 'end_time',
    spot_from='reserved', spot_to='available',
    counter_deltas=(('reserved_count', -1),),
)


@dataclass(frozen=True)
class Actor:
    user_id: object
    role: str = 'User'

    @property
    def is_staff(self):
        return self.role in STAFF_ROLES


def confirm(reservation_id, actor=None):
    return apply(reservation_id, CONFIRM, actor)


def end(reservation_id, actor=None):
    return apply(reservation_id, END, actor)


def release(reservation_id, actor=None):
    return apply(reservation_id, RELEASE, actor)


def apply(reservation_id, transition, actor=None):
    with transaction():
        apply_in_transaction(reservation_id, transition, actor)
    reservation = db.session.get(Reservation, reservation_id)
    logger.info("Reservation %s: %s -> %s (%s)", reservation_id, transition.source, transition.target, transition.name)
    return reservation


def apply_in_transaction(reservation_id, transition, actor=None):
    """Run one transition inside the caller's open transaction."""
    reservation = db.session.get(Reservation, reservation_id)
    if reservation is None:
        raise ReservationNotFound()
    if actor is not None and not actor.is_staff and reservation.user_id != actor.user_id:
        # Other users' reservations are indistinguishable from missing ones
        raise ReservationNotFound()

    if reservation.status != transition.source:
        raise _stale(transition, reservation.reservation_id, reservation.status)

    now = utcnow()
    rows = Reservation.query.filter_by(
        reservation_id=reservation_id,
        status=transition.source
    ).update({'status': transition.target, transition.timestamp_field: now}, synchronize_session=False)
    if rows != 1:
        raise _stale(transition, reservation_id, 'changed')

    if reservation.target_kind == SPOT:
        _move_spot(reservation.spot_id, transition, now)
    else:
        adjust_section_counters(reservation.section_id, transition.counter_deltas)

    db.session.refresh(reservation)
    return reservation


def _stale(transition, reservation_id, current_status):
    return transition.stale_error(
        f"Cannot {transition.name} a reservation that is {current_status}",
        details={'reservation_id': str(reservation_id), 'status': current_status, 'expected': transition.source}
    )


def _move_spot(spot_id, transition, now):
    rows = ParkingSpot.query.filter_by(
        spot_id=spot_id,
        status=transition.spot_from
    ).update({'status': transition.spot_to, 'updated_at': now}, synchronize_session=False)
    if rows != 1:
        logger.warning("Spot %s was not %s during %s", spot_id, transition.spot_from, transition.name)
        raise StaleTransition(
            f"Parking spot is no longer {transition.spot_from}",
            details={'spot_id': str(spot_id), 'expected': transition.spot_from}
        )


def adjust_section_counters(section_id, deltas):
    """Apply counter deltas to a locked section row, floored at zero.

    Going below zero means counters drifted from reservation rows; the floor
    keeps the row valid and the drift is logged for reconciliation.
    """
    section = ParkingSection.query.filter_by(section_id=section_id).with_for_update().populate_existing().first()
    if section is None:
        raise StaleTransition('Parking section no longer exists', details={'section_id': str(section_id)})

    values = {'updated_at': utcnow()}
    resulting = {'parked_count': section.parked_count or 0, 'reserved_count': section.reserved_count or 0}
    for field, delta in deltas:
        current = resulting[field]
        if current + delta < 0:
            logger.warning("Section %s %s would drop below zero (%d%+d); flooring", section.name, field, current, delta)
        resulting[field] = max(0, current + delta)
        column = getattr(ParkingSection, field)
        values[field] = case((column + delta < 0, 0), else_=column + delta)

    if resulting['parked_count'] + resulting['reserved_count'] > section.capacity:
        logger.warning(
            "Section %s counters would exceed capacity %d (parked %d, reserved %d); run reconciliation",
            section.name, section.capacity, resulting['parked_count'], resulting['reserved_count']
        )
        raise StaleTransition(
            'Section counters are out of sync with reservations',
            details={'section_id': str(section_id), 'capacity': section.capacity}
        )

    ParkingSection.query.filter_by(section_id=section_id).update(values, synchronize_session=False)
    db.session.refresh(section)
    return section
