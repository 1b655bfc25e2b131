# db/initializers/parking_initializer.py
import logging

from tappark_api.db.db import db
from tappark_api.models.parking_area import ParkingArea
from tappark_api.models.parking_section import ParkingSection
from tappark_api.models.parking_spot import ParkingSpot

logger = logging.getLogger(__name__)

# Discrete sections: one row per spot
SPOT_SECTIONS = {
    'top': ('car', 13),
    'left': ('car', 13),
    'right': ('car', 9),
    'center': ('car', 28),
    'bike-left': ('bike', 14),
    'bike-right': ('bike', 14),
}

# Capacity sections: counters only, no spot rows
CAPACITY_SECTIONS = {
    'Moto-1': ('motorcycle', 30),
    'Moto-2': ('motorcycle', 20),
}


def initialize_parking_layout(area_name='Main Campus Parking', location='PE Building'):
    """Seed one parking area with its sections if it doesn't already exist."""
    if ParkingArea.query.filter_by(name=area_name).first():
        logger.info("Parking area %s already initialized", area_name)
        return None

    area = ParkingArea(name=area_name, location=location, floors=1)
    db.session.add(area)
    db.session.flush()

    for name, (spot_type, count) in SPOT_SECTIONS.items():
        section = ParkingSection(
            area_id=area.area_id,
            name=name,
            vehicle_type=spot_type,
            mode='discrete',
            capacity=count
        )
        db.session.add(section)
        db.session.flush()
        for number in range(1, count + 1):
            db.session.add(ParkingSpot(
                section_id=section.section_id,
                number=number,
                spot_type=spot_type,
                status='available'
            ))

    for name, (vehicle_type, capacity) in CAPACITY_SECTIONS.items():
        db.session.add(ParkingSection(
            area_id=area.area_id,
            name=name,
            vehicle_type=vehicle_type,
            mode='capacity_only',
            capacity=capacity
        ))

    db.session.commit()
    logger.info("Parking area %s initialized", area_name)
    return area
