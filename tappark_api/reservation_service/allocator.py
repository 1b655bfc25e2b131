"""Claims a discrete spot or a unit of section capacity for one occupant.

Discrete spots are claimed with a row lock plus a conditional
``available -> reserved`` update. Capacity sections are claimed by locking the
section row and incrementing its counter with an update that is itself bounded
by the remaining capacity. Pseudo-spot labels are derived after the claim and
are never used to decide what is free.
"""
import logging

from sqlalchemy.exc import IntegrityError

from tappark_api.db.db import db, transaction
from tappark_api.models.base import utcnow
from tappark_api.models.parking_section import ParkingSection
from tappark_api.models.parking_spot import ParkingSpot
from tappark_api.models.refs import SpotRef, SectionRef, Registered, Guest, SPOT
from tappark_api.models.reservation import Reservation, RESERVED, ACTIVE, LIVE_STATUSES, LIVE_USER_INDEX
from tappark_api.models.users import User
from tappark_api.models.vehicle import Vehicle
from tappark_api.reservation_service import tokens
from tappark_api.reservation_service.compatibility import check_compatible
from tappark_api.reservation_service.errors import (
    ConcurrentConflict,
    ResourceNotFound,
    ResourceUnavailable,
    UserAlreadyParked,
    ValidationError,
    VehicleNotFound,
)

logger = logging.getLogger(__name__)


def reserve(user_id, vehicle_id, target):
    """Book ``target`` for a registered user; the reservation starts ``reserved``."""
    with transaction():
        # Serializes bookings by the same user
        User.query.filter_by(id=user_id).with_for_update().first()
        _ensure_not_parked(user_id)

        vehicle = Vehicle.query.filter_by(vehicle_id=vehicle_id, user_id=user_id).first()
        if not vehicle:
            raise VehicleNotFound()

        reservation = _claim(target, vehicle.vehicle_type, walk_in=False)
        reservation.occupant = Registered(user_id)
        reservation.vehicle_id = vehicle.vehicle_id
        tokens.mint(reservation)

        db.session.add(reservation)
        _flush_registered(user_id)
        reservation_id = reservation.reservation_id

    logger.info("Reserved %s %s for user %s (reservation %s)", target.kind, _target_id(target), user_id, reservation_id)
    return db.session.get(Reservation, reservation_id)


def assign_guest(target, guest, vehicle_type=None):
    """Walk-up booking made by an attendant; the session starts ``active`` at once."""
    if not isinstance(guest, Guest) or not (guest.name or '').strip():
        raise ValidationError('Guest name is required')
    if not (guest.plate_number or '').strip():
        raise ValidationError('Guest plate number is required')

    with transaction():
        reservation = _claim(target, vehicle_type, walk_in=True)
        reservation.occupant = guest
        tokens.mint(reservation)

        db.session.add(reservation)
        db.session.flush()
        reservation_id = reservation.reservation_id

    logger.info("Guest %s assigned to %s %s (reservation %s)", guest.name, target.kind, _target_id(target), reservation_id)
    return db.session.get(Reservation, reservation_id)


def _target_id(target):
    return target.spot_id if target.kind == SPOT else target.section_id


def _ensure_not_parked(user_id):
    existing = Reservation.query.filter(
        Reservation.user_id == user_id,
        Reservation.status.in_(LIVE_STATUSES)
    ).first()
    if existing:
        raise UserAlreadyParked(details={
            'reservation_id': str(existing.reservation_id),
            'status': existing.status
        })


def _flush_registered(user_id):
    try:
        db.session.flush()
    except IntegrityError as e:
        if not _is_live_user_conflict(e):
            raise
        logger.info("Concurrent booking for user %s rejected by %s", user_id, LIVE_USER_INDEX)
        raise UserAlreadyParked() from e


def _is_live_user_conflict(error):
    message = str(error.orig)
    # PostgreSQL names the index; SQLite names the column
    return LIVE_USER_INDEX in message or 'reservations.user_id' in message


def _claim(target, vehicle_type, walk_in):
    if isinstance(target, SpotRef):
        return _claim_spot(target.spot_id, vehicle_type, walk_in)
    if isinstance(target, SectionRef):
        return _claim_section_capacity(target.section_id, vehicle_type, walk_in)
    raise ValidationError('Unknown reservation target')


def _claim_spot(spot_id, vehicle_type, walk_in):
    spot = ParkingSpot.query.filter_by(spot_id=spot_id).first()
    if not spot:
        raise ResourceNotFound('Parking spot not found')
    if vehicle_type is not None:
        check_compatible(vehicle_type, spot.spot_type)

    # Exclusive row lock, then re-check under it
    spot = ParkingSpot.query.filter_by(spot_id=spot_id).with_for_update().populate_existing().first()
    section = db.session.get(ParkingSection, spot.section_id)
    if spot.status != 'available' or section.status == 'unavailable':
        raise ResourceUnavailable(
            'Parking spot is no longer available',
            details={'spot_id': str(spot_id), 'status': spot.status}
        )

    new_status = 'occupied' if walk_in else 'reserved'
    rows = ParkingSpot.query.filter_by(
        spot_id=spot_id,
        status='available'
    ).update({'status': new_status, 'updated_at': utcnow()}, synchronize_session=False)
    if rows != 1:
        logger.info("Lost race for spot %s", spot_id)
        raise ConcurrentConflict(details={'spot_id': str(spot_id)})

    reservation = Reservation(
        target=SpotRef(spot.spot_id),
        section_id=spot.section_id,
        status=ACTIVE if walk_in else RESERVED,
        created_at=utcnow()
    )
    if walk_in:
        reservation.start_time = reservation.created_at
    return reservation


def _claim_section_capacity(section_id, vehicle_type, walk_in):
    section = ParkingSection.query.filter_by(section_id=section_id).first()
    if not section:
        raise ResourceNotFound('Parking section not found')
    if not section.is_capacity_only:
        raise ValidationError(
            f'Section {section.name} has individual spots; book a spot instead',
            details={'section_id': str(section_id), 'mode': section.mode}
        )
    if vehicle_type is not None:
        check_compatible(vehicle_type, section.vehicle_type)

    section = ParkingSection.query.filter_by(section_id=section_id).with_for_update().populate_existing().first()
    if section.status == 'unavailable' or section.available_count() <= 0:
        raise ResourceUnavailable(
            f'No available capacity in section {section.name}',
            details={'section_id': str(section_id), 'available': section.available_count(), 'status': section.status}
        )

    counter = ParkingSection.parked_count if walk_in else ParkingSection.reserved_count
    rows = ParkingSection.query.filter(
        ParkingSection.section_id == section_id,
        ParkingSection.status != 'unavailable',
        ParkingSection.parked_count + ParkingSection.reserved_count < ParkingSection.capacity
    ).update({counter: counter + 1, ParkingSection.updated_at: utcnow()}, synchronize_session=False)
    if rows != 1:
        raise ResourceUnavailable(
            f'No available capacity in section {section.name}',
            details={'section_id': str(section_id), 'available': 0}
        )

    db.session.refresh(section)
    label_number = section.used_count() if walk_in else section.reserved_count

    reservation = Reservation(
        target=SectionRef(section.section_id),
        pseudo_label=f'{section.name}-{label_number}',
        status=ACTIVE if walk_in else RESERVED,
        created_at=utcnow()
    )
    if walk_in:
        reservation.start_time = reservation.created_at
    return reservation
