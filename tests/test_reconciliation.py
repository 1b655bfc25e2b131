from tappark_api.db.db import db
from tappark_api.models import ParkingSection, ParkingSpot
from tappark_api.models.refs import SectionRef, SpotRef
from tappark_api.reservation_service import allocator, state_machine
from tappark_api.reservation_service.reconciliation import reconcile


def test_consistent_state_has_no_drift(layout, make_user, make_vehicle):
    rider, driver = make_user(), make_user()
    booked = allocator.reserve(rider.id, make_vehicle(rider, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))
    allocator.reserve(driver.id, make_vehicle(driver, 'car').vehicle_id, SpotRef(layout.car_spot_ids[0]))
    state_machine.confirm(booked.reservation_id)

    report = reconcile()

    assert report['drifted'] is False
    assert report['sections'] == []
    assert report['spots'] == []


def test_reports_and_repairs_drift(layout, make_user, make_vehicle, fresh):
    rider = make_user()
    allocator.reserve(rider.id, make_vehicle(rider, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))
    ParkingSection.query.filter_by(section_id=layout.moto_section_id).update({'reserved_count': 3})
    ParkingSpot.query.filter_by(spot_id=layout.car_spot_ids[2]).update({'status': 'occupied'})
    db.session.commit()

    report = reconcile()
    assert report['drifted'] is True
    assert report['sections'][0]['expected_reserved'] == 1
    assert report['spots'] == [{
        'spot_id': str(layout.car_spot_ids[2]),
        'status': 'occupied',
        'expected_status': 'available'
    }]
    # Report-only mode leaves rows untouched
    assert fresh(ParkingSection, layout.moto_section_id).reserved_count == 3

    reconcile(repair=True)

    assert fresh(ParkingSection, layout.moto_section_id).reserved_count == 1
    assert fresh(ParkingSpot, layout.car_spot_ids[2]).status == 'available'
    assert reconcile()['drifted'] is False


def test_maintenance_spots_are_not_drift(layout):
    ParkingSpot.query.filter_by(spot_id=layout.car_spot_ids[0]).update({'status': 'maintenance'})
    db.session.commit()

    assert reconcile()['drifted'] is False
