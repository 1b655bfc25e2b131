"""Display-only pseudo-spot grid for capacity sections.

Nothing here feeds allocation: capacity is claimed from the section counters.
A reservation is shown on the pseudo-spot named by its stored label when that
label is in range and not already shown; the rest fill the lowest free
pseudo-spots in booking order, so renamed sections and repeated labels still
render one occupant per pseudo-spot.
"""
import logging

from tappark_api.db.db import db
from tappark_api.models.base import isoformat
from tappark_api.models.parking_section import ParkingSection
from tappark_api.models.refs import SECTION
from tappark_api.models.reservation import Reservation, ACTIVE, LIVE_STATUSES
from tappark_api.reservation_service.errors import ResourceNotFound, ValidationError

logger = logging.getLogger(__name__)

SPOT_STATUS_BY_RESERVATION = {
    'reserved': 'reserved',
    'active': 'occupied',
}


def pseudo_label(section_name, index):
    return f'{section_name}-{index}'


def place_reservations(section_name, capacity, reservations):
    """Map pseudo-spot index (1-based) to reservation.

    ``reservations`` must be in booking order. Returns ``(placements,
    overflow)`` where ``overflow`` lists reservations that did not fit, which
    only happens when counters and rows have drifted.
    """
    index_by_label = {pseudo_label(section_name, i): i for i in range(1, capacity + 1)}
    placements = {}
    unplaced = []

    for reservation in reservations:
        index = index_by_label.get(reservation.pseudo_label)
        if index is not None and index not in placements:
            placements[index] = reservation
        else:
            unplaced.append(reservation)

    free = (i for i in range(1, capacity + 1) if i not in placements)
    overflow = []
    for reservation in unplaced:
        index = next(free, None)
        if index is None:
            overflow.append(reservation)
            continue
        placements[index] = reservation

    return placements, overflow


def _occupant_detail(reservation, caller_id):
    vehicle = reservation.vehicle
    return {
        'reservation_id': str(reservation.reservation_id),
        'user_id': str(reservation.user_id) if reservation.user_id else None,
        'name': reservation.occupant_name(),
        'is_guest': reservation.user_id is None,
        'plate_number': reservation.plate_number(),
        'brand': vehicle.brand if vehicle else None,
        'color': vehicle.color if vehicle else None,
        'status': reservation.status,
        'booked_at': isoformat(reservation.created_at),
        'start_time': isoformat(reservation.start_time),
        'is_caller_booked': caller_id is not None and reservation.user_id == caller_id
    }


def _live_section_reservations(section_id):
    return Reservation.query.filter(
        Reservation.section_id == section_id,
        Reservation.target_kind == SECTION,
        Reservation.status.in_(LIVE_STATUSES)
    ).order_by(Reservation.created_at, Reservation.reservation_id).all()


def _get_capacity_section(section_id):
    section = db.session.get(ParkingSection, section_id)
    if not section:
        raise ResourceNotFound('Parking section not found')
    if not section.is_capacity_only:
        raise ValidationError(
            f'Section {section.name} has individual spots',
            details={'section_id': str(section_id), 'mode': section.mode}
        )
    return section


def list_virtual_spots(section_id, caller_id=None):
    section = _get_capacity_section(section_id)
    reservations = _live_section_reservations(section_id)
    placements, overflow = place_reservations(section.name, section.capacity, reservations)
    if overflow:
        logger.warning(
            "Section %s has %d live reservations beyond its capacity of %d",
            section.name, len(overflow), section.capacity
        )

    spots = []
    for index in range(1, section.capacity + 1):
        reservation = placements.get(index)
        spots.append({
            'spot_id': f'{section.section_id}-virtual-{index}',
            'index': index,
            'label': pseudo_label(section.name, index),
            'spot_type': section.vehicle_type,
            'section_name': section.name,
            'status': SPOT_STATUS_BY_RESERVATION[reservation.status] if reservation else 'available',
            'is_caller_booked': bool(reservation) and caller_id is not None and reservation.user_id == caller_id,
            'reservation': _occupant_detail(reservation, caller_id) if reservation else None
        })

    return {
        'section_id': str(section.section_id),
        'section_name': section.name,
        'section_status': section.status,
        'spots': spots,
        'total_spots': len(spots),
        'available_spots': sum(1 for s in spots if s['status'] == 'available'),
        'occupied_spots': sum(1 for s in spots if s['status'] == 'occupied'),
        'reserved_spots': sum(1 for s in spots if s['status'] == 'reserved')
    }


def list_parked_occupants(section_id):
    """Active sessions in a capacity section, most recent first."""
    section = _get_capacity_section(section_id)
    parked = Reservation.query.filter(
        Reservation.section_id == section_id,
        Reservation.status == ACTIVE
    ).order_by(Reservation.start_time.desc()).all()

    return {
        'section_id': str(section.section_id),
        'section_name': section.name,
        'parked_users': [_occupant_detail(r, None) for r in parked],
        'total_parked': len(parked)
    }
