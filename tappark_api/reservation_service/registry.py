"""Read side of the spot and section catalog, plus attendant status changes."""
import logging

from sqlalchemy import exists, and_, literal

from tappark_api.db.db import db, transaction
from tappark_api.models.base import utcnow
from tappark_api.models.parking_area import ParkingArea
from tappark_api.models.parking_section import ParkingSection, SECTION_STATUSES
from tappark_api.models.parking_spot import ParkingSpot
from tappark_api.models.refs import SpotRef
from tappark_api.models.reservation import Reservation, LIVE_STATUSES
from tappark_api.reservation_service.compatibility import expected_spot_type
from tappark_api.reservation_service.errors import ResourceNotFound, StaleTransition, ValidationError

logger = logging.getLogger(__name__)

SPOT_ADMIN_STATUSES = ('available', 'maintenance')


def list_areas():
    areas = ParkingArea.query.filter_by(status='active').order_by(ParkingArea.name).all()
    return [area.to_dict() for area in areas]


def _get_area(area_id):
    area = db.session.get(ParkingArea, area_id)
    if not area:
        raise ResourceNotFound('Parking area not found')
    return area


def list_available(area_id, vehicle_type=None, include_all=False):
    """Capacity sections and discrete spots in an area that fit the vehicle type.

    Sections and spots under an ``unavailable`` section are never listed.
    With ``include_all`` full sections and taken spots are listed too.
    """
    _get_area(area_id)
    spot_type = expected_spot_type(vehicle_type) if vehicle_type else None

    section_query = ParkingSection.query.filter(
        ParkingSection.area_id == area_id,
        ParkingSection.mode == 'capacity_only',
        ParkingSection.status != 'unavailable'
    )
    if spot_type:
        section_query = section_query.filter(ParkingSection.vehicle_type == spot_type)
    if not include_all:
        section_query = section_query.filter(
            ParkingSection.capacity - ParkingSection.parked_count - ParkingSection.reserved_count > 0
        )

    spot_query = ParkingSpot.query.join(ParkingSection).filter(
        ParkingSection.area_id == area_id,
        ParkingSection.status != 'unavailable'
    )
    if spot_type:
        spot_query = spot_query.filter(ParkingSpot.spot_type == spot_type)
    if not include_all:
        spot_query = spot_query.filter(ParkingSpot.status == 'available')

    resources = []
    for section in section_query.order_by(ParkingSection.name).all():
        resources.append({
            'kind': 'section',
            'id': str(section.section_id),
            'label': section.name,
            'section_name': section.name,
            'spot_type': section.vehicle_type,
            'status': 'available' if section.is_bookable() else 'full',
            'available': section.available_count(),
            'capacity': section.capacity
        })
    for spot in spot_query.order_by(ParkingSection.name, ParkingSpot.number).all():
        resources.append({
            'kind': 'spot',
            'id': str(spot.spot_id),
            'label': spot.label,
            'section_name': spot.section.name,
            'spot_type': spot.spot_type,
            'status': spot.status,
            'available': 1 if spot.status == 'available' else 0,
            'capacity': 1
        })
    return resources


def get_status(ref):
    if isinstance(ref, SpotRef):
        spot = db.session.get(ParkingSpot, ref.spot_id)
        if not spot:
            raise ResourceNotFound('Parking spot not found')
        data = spot.to_dict()
        data['kind'] = 'spot'
        data['section_status'] = spot.section.status
        return data

    section = db.session.get(ParkingSection, ref.section_id)
    if not section:
        raise ResourceNotFound('Parking section not found')
    data = section.to_dict()
    data['kind'] = 'section'
    data['utilization'] = section.utilization()
    return data


def capacity_status(area_id, caller_id=None):
    """Per-section counters for the capacity sections of an area."""
    _get_area(area_id)

    booked = literal(False)
    if caller_id is not None:
        booked = exists().where(and_(
            Reservation.section_id == ParkingSection.section_id,
            Reservation.user_id == caller_id,
            Reservation.status.in_(LIVE_STATUSES)
        )).correlate(ParkingSection)

    rows = db.session.query(ParkingSection, booked).filter(
        ParkingSection.area_id == area_id,
        ParkingSection.mode == 'capacity_only'
    ).order_by(ParkingSection.name).all()

    result = []
    for section, is_booked in rows:
        result.append({
            'section_id': str(section.section_id),
            'section_name': section.name,
            'vehicle_type': section.vehicle_type,
            'capacity': section.capacity,
            'parked': section.parked_count,
            'reserved': section.reserved_count,
            'available': section.available_count(),
            'utilization': section.utilization(),
            'status': section.status or 'available',
            'is_caller_booked': bool(is_booked)
        })
    return result


def set_section_status(section_id, status):
    if status not in SECTION_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(SECTION_STATUSES)}")

    with transaction():
        section = ParkingSection.query.filter_by(section_id=section_id).with_for_update().first()
        if not section:
            raise ResourceNotFound('Parking section not found')
        previous = section.status
        section.status = status
        section.updated_at = utcnow()

    logger.info("Section %s status %s -> %s", section_id, previous, status)
    return db.session.get(ParkingSection, section_id).to_dict()


def set_spot_status(spot_id, status):
    """Move a spot in or out of maintenance. Spots held by a reservation are refused."""
    if status not in SPOT_ADMIN_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(SPOT_ADMIN_STATUSES)}")

    with transaction():
        spot = db.session.get(ParkingSpot, spot_id)
        if not spot:
            raise ResourceNotFound('Parking spot not found')
        rows = ParkingSpot.query.filter(
            ParkingSpot.spot_id == spot_id,
            ParkingSpot.status.in_(SPOT_ADMIN_STATUSES)
        ).update({'status': status, 'updated_at': utcnow()}, synchronize_session=False)
        if rows != 1:
            raise StaleTransition(
                'Cannot update status. Spot has a reservation',
                details={'spot_id': str(spot_id), 'status': spot.status}
            )

    logger.info("Spot %s status set to %s", spot_id, status)
    spot = db.session.get(ParkingSpot, spot_id)
    db.session.refresh(spot)
    return spot.to_dict()
