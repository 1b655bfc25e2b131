"""Detect and repair drift between cached counters and reservation rows.

Section counters and spot statuses are a projection of live reservations.
This routine recomputes that projection from the rows themselves.
"""
import logging

from sqlalchemy import func

from tappark_api.db.db import db, transaction
from tappark_api.models.base import utcnow
from tappark_api.models.parking_section import ParkingSection
from tappark_api.models.parking_spot import ParkingSpot
from tappark_api.models.refs import SPOT, SECTION
from tappark_api.models.reservation import Reservation, RESERVED, ACTIVE, LIVE_STATUSES

logger = logging.getLogger(__name__)

SPOT_STATUS_FOR = {RESERVED: 'reserved', ACTIVE: 'occupied'}


def _section_counts():
    rows = db.session.query(
        Reservation.section_id, Reservation.status, func.count(Reservation.reservation_id)
    ).filter(
        Reservation.target_kind == SECTION,
        Reservation.status.in_(LIVE_STATUSES)
    ).group_by(Reservation.section_id, Reservation.status).all()

    counts = {}
    for section_id, status, count in rows:
        counts.setdefault(section_id, {RESERVED: 0, ACTIVE: 0})[status] = count
    return counts


def _live_spot_statuses():
    rows = db.session.query(Reservation.spot_id, Reservation.status).filter(
        Reservation.target_kind == SPOT,
        Reservation.status.in_(LIVE_STATUSES)
    ).all()
    return {spot_id: status for spot_id, status in rows}


def expected_spot_status(current, live_status):
    if live_status is not None:
        return SPOT_STATUS_FOR[live_status]
    if current == 'maintenance':
        return 'maintenance'
    return 'available'


def find_drift(lock=False):
    counts = _section_counts()
    live_spots = _live_spot_statuses()

    section_query = ParkingSection.query.filter_by(mode='capacity_only')
    spot_query = ParkingSpot.query
    if lock:
        section_query = section_query.with_for_update().populate_existing()
        spot_query = spot_query.with_for_update().populate_existing()

    sections = []
    for section in section_query.order_by(ParkingSection.section_id).all():
        expected = counts.get(section.section_id, {RESERVED: 0, ACTIVE: 0})
        if section.reserved_count != expected[RESERVED] or section.parked_count != expected[ACTIVE]:
            sections.append({
                'section_id': section.section_id,
                'section_name': section.name,
                'reserved_count': section.reserved_count,
                'parked_count': section.parked_count,
                'expected_reserved': expected[RESERVED],
                'expected_parked': expected[ACTIVE]
            })

    spots = []
    for spot in spot_query.order_by(ParkingSpot.spot_id).all():
        expected = expected_spot_status(spot.status, live_spots.get(spot.spot_id))
        if spot.status != expected:
            spots.append({
                'spot_id': spot.spot_id,
                'status': spot.status,
                'expected_status': expected
            })

    return {'sections': sections, 'spots': spots}


def reconcile(repair=False):
    """Report drift and, with ``repair``, rewrite drifted rows in one transaction."""
    if not repair:
        return _serialize(find_drift())

    with transaction():
        drift = find_drift(lock=True)
        now = utcnow()
        for entry in drift['sections']:
            ParkingSection.query.filter_by(section_id=entry['section_id']).update({
                'reserved_count': entry['expected_reserved'],
                'parked_count': entry['expected_parked'],
                'updated_at': now
            }, synchronize_session=False)
            logger.warning(
                "Repaired section %s counters: reserved %d->%d, parked %d->%d",
                entry['section_name'], entry['reserved_count'], entry['expected_reserved'],
                entry['parked_count'], entry['expected_parked']
            )
        for entry in drift['spots']:
            ParkingSpot.query.filter_by(spot_id=entry['spot_id']).update(
                {'status': entry['expected_status'], 'updated_at': now},
                synchronize_session=False
            )
            logger.warning("Repaired spot %s status %s->%s", entry['spot_id'], entry['status'], entry['expected_status'])

    return _serialize(drift)


def _serialize(drift):
    for entry in drift['sections']:
        entry['section_id'] = str(entry['section_id'])
    for entry in drift['spots']:
        entry['spot_id'] = str(entry['spot_id'])
    drift['drifted'] = bool(drift['sections'] or drift['spots'])
    return drift
