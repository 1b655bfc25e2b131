import uuid

import pytest

from tappark_api.models import ParkingSection, ParkingSpot, Reservation
from tappark_api.models.refs import SpotRef, SectionRef, Guest
from tappark_api.reservation_service import allocator, registry
from tappark_api.reservation_service.errors import (
    ResourceNotFound,
    ResourceUnavailable,
    UserAlreadyParked,
    ValidationError,
    VehicleNotFound,
    VehicleTypeMismatch,
)


def test_reserve_spot_marks_spot_reserved(layout, make_user, make_vehicle, fresh):
    user = make_user()
    vehicle = make_vehicle(user, 'car')

    reservation = allocator.reserve(user.id, vehicle.vehicle_id, SpotRef(layout.car_spot_ids[0]))

    assert reservation.status == 'reserved'
    assert reservation.target == SpotRef(layout.car_spot_ids[0])
    assert reservation.section_id == layout.car_section_id
    assert reservation.display_label == 'A-1'
    assert reservation.token
    assert fresh(ParkingSpot, layout.car_spot_ids[0]).status == 'reserved'


def test_reserve_capacity_increments_reserved_count(layout, make_user, make_vehicle, fresh):
    first = make_user()
    second = make_user()

    r1 = allocator.reserve(first.id, make_vehicle(first, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))
    r2 = allocator.reserve(second.id, make_vehicle(second, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))

    section = fresh(ParkingSection, layout.moto_section_id)
    assert section.reserved_count == 2
    assert section.parked_count == 0
    assert r1.target_kind == 'section'
    assert r1.spot_id is None
    assert r1.pseudo_label == 'Moto-1'
    assert r2.pseudo_label == 'Moto-2'


def test_full_section_is_unavailable(layout, make_user, make_vehicle, fresh):
    for _ in range(3):
        user = make_user()
        allocator.reserve(user.id, make_vehicle(user, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))

    late = make_user()
    with pytest.raises(ResourceUnavailable):
        allocator.reserve(late.id, make_vehicle(late, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))

    section = fresh(ParkingSection, layout.moto_section_id)
    assert section.reserved_count == 3
    assert Reservation.query.filter_by(user_id=late.id).count() == 0


def test_user_with_live_reservation_cannot_book_again(layout, make_user, make_vehicle, fresh):
    user = make_user()
    vehicle = make_vehicle(user, 'car')
    allocator.reserve(user.id, vehicle.vehicle_id, SpotRef(layout.car_spot_ids[0]))

    with pytest.raises(UserAlreadyParked) as exc:
        allocator.reserve(user.id, vehicle.vehicle_id, SpotRef(layout.car_spot_ids[1]))

    assert exc.value.code == 'USER_ALREADY_PARKED'
    assert fresh(ParkingSpot, layout.car_spot_ids[1]).status == 'available'


def test_vehicle_must_belong_to_user(layout, make_user, make_vehicle):
    owner = make_user()
    other = make_user()
    vehicle = make_vehicle(owner, 'car')

    with pytest.raises(VehicleNotFound):
        allocator.reserve(other.id, vehicle.vehicle_id, SpotRef(layout.car_spot_ids[0]))


def test_type_mismatch_reports_expected_and_actual(layout, make_user, make_vehicle, fresh):
    user = make_user()
    vehicle = make_vehicle(user, 'car')

    with pytest.raises(VehicleTypeMismatch) as exc:
        allocator.reserve(user.id, vehicle.vehicle_id, SpotRef(layout.bike_spot_ids[0]))

    assert exc.value.details == {'vehicle_type': 'car', 'spot_type': 'bike', 'expected_spot_type': 'car'}
    assert fresh(ParkingSpot, layout.bike_spot_ids[0]).status == 'available'


@pytest.mark.parametrize('vehicle_type', ['bicycle', 'EBike', 'ebike'])
def test_bicycles_and_ebikes_fit_bike_spots(layout, make_user, make_vehicle, vehicle_type):
    user = make_user()
    vehicle = make_vehicle(user, vehicle_type)

    reservation = allocator.reserve(user.id, vehicle.vehicle_id, SpotRef(layout.bike_spot_ids[0]))

    assert reservation.status == 'reserved'


def test_spot_in_maintenance_cannot_be_reserved(layout, make_user, make_vehicle):
    registry.set_spot_status(layout.car_spot_ids[0], 'maintenance')
    user = make_user()

    with pytest.raises(ResourceUnavailable):
        allocator.reserve(user.id, make_vehicle(user, 'car').vehicle_id, SpotRef(layout.car_spot_ids[0]))


def test_unavailable_section_blocks_both_paths(layout, make_user, make_vehicle):
    registry.set_section_status(layout.moto_section_id, 'unavailable')
    registry.set_section_status(layout.car_section_id, 'unavailable')
    rider = make_user()
    driver = make_user()

    with pytest.raises(ResourceUnavailable):
        allocator.reserve(rider.id, make_vehicle(rider, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))
    with pytest.raises(ResourceUnavailable):
        allocator.reserve(driver.id, make_vehicle(driver, 'car').vehicle_id, SpotRef(layout.car_spot_ids[0]))


def test_discrete_section_cannot_be_booked_by_capacity(layout, make_user, make_vehicle):
    user = make_user()

    with pytest.raises(ValidationError):
        allocator.reserve(user.id, make_vehicle(user, 'car').vehicle_id, SectionRef(layout.car_section_id))


def test_unknown_resources(layout, make_user, make_vehicle):
    user = make_user()
    vehicle = make_vehicle(user, 'car')

    with pytest.raises(ResourceNotFound):
        allocator.reserve(user.id, vehicle.vehicle_id, SpotRef(uuid.uuid4()))
    with pytest.raises(ResourceNotFound):
        allocator.reserve(user.id, vehicle.vehicle_id, SectionRef(uuid.uuid4()))


def test_guest_walk_in_starts_active(layout, fresh):
    guest = Guest(name='Maria Santos', contact='09171234567', plate_number='XYZ123')

    reservation = allocator.assign_guest(SectionRef(layout.moto_section_id), guest, vehicle_type='motorcycle')

    assert reservation.status == 'active'
    assert reservation.start_time is not None
    assert reservation.user_id is None
    assert reservation.occupant == guest
    assert reservation.pseudo_label == 'Moto-1'
    section = fresh(ParkingSection, layout.moto_section_id)
    assert section.parked_count == 1
    assert section.reserved_count == 0


def test_guest_walk_in_on_spot_occupies_it(layout, fresh):
    guest = Guest(name='Maria Santos', plate_number='XYZ123')

    reservation = allocator.assign_guest(SpotRef(layout.car_spot_ids[2]), guest, vehicle_type='car')

    assert reservation.status == 'active'
    assert fresh(ParkingSpot, layout.car_spot_ids[2]).status == 'occupied'


def test_guest_requires_name_and_plate(layout):
    with pytest.raises(ValidationError):
        allocator.assign_guest(SectionRef(layout.moto_section_id), Guest(name='', plate_number='XYZ123'))
    with pytest.raises(ValidationError):
        allocator.assign_guest(SectionRef(layout.moto_section_id), Guest(name='Maria'))


def test_live_reservation_index_rejects_second_booking(layout, make_user, make_vehicle, fresh, monkeypatch):
    user = make_user()
    vehicle = make_vehicle(user, 'car')
    allocator.reserve(user.id, vehicle.vehicle_id, SpotRef(layout.car_spot_ids[0]))
    # Skip the read-side check so only the database constraint stands in the way
    monkeypatch.setattr(allocator, '_ensure_not_parked', lambda user_id: None)

    with pytest.raises(UserAlreadyParked):
        allocator.reserve(user.id, vehicle.vehicle_id, SpotRef(layout.car_spot_ids[1]))

    assert fresh(ParkingSpot, layout.car_spot_ids[1]).status == 'available'
    assert Reservation.query.filter_by(user_id=user.id).count() == 1
