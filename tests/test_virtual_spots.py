from types import SimpleNamespace

import pytest

from tappark_api.models.refs import SectionRef, Guest
from tappark_api.reservation_service import allocator, state_machine
from tappark_api.reservation_service.errors import ValidationError
from tappark_api.reservation_service.virtual_spots import (
    list_parked_occupants,
    list_virtual_spots,
    place_reservations,
)


def booked(label):
    return SimpleNamespace(pseudo_label=label)


def test_reservation_is_shown_on_its_labelled_spot():
    reservation = booked('A-2')

    placements, overflow = place_reservations('A', 3, [reservation])

    assert placements == {2: reservation}
    assert overflow == []


def test_repeated_labels_fall_back_to_booking_order():
    first, second, third = booked('A-1'), booked('A-1'), booked(None)

    placements, _ = place_reservations('A', 3, [first, second, third])

    assert placements == {1: first, 2: second, 3: third}


def test_labels_from_a_renamed_section_still_render():
    old = booked('Moto-2')

    placements, _ = place_reservations('M', 2, [old])

    assert placements == {1: old}


def test_out_of_range_labels_are_placed_in_order():
    late = booked('A-7')
    early = booked('A-1')

    placements, overflow = place_reservations('A', 2, [late, early])

    assert placements == {1: early, 2: late}
    assert overflow == []


def test_more_reservations_than_capacity_overflow():
    a, b, c = booked('A-1'), booked('A-2'), booked('A-2')

    placements, overflow = place_reservations('A', 2, [a, b, c])

    assert placements == {1: a, 2: b}
    assert overflow == [c]


def test_grid_after_release_and_rebook(layout, make_user, make_vehicle):
    users = [make_user() for _ in range(3)]
    target = SectionRef(layout.moto_section_id)
    first = allocator.reserve(users[0].id, make_vehicle(users[0], 'motorcycle').vehicle_id, target)
    second = allocator.reserve(users[1].id, make_vehicle(users[1], 'motorcycle').vehicle_id, target)
    state_machine.release(first.reservation_id)
    # reserved_count went 2 -> 1 -> 2, so the new label repeats Moto-2
    third = allocator.reserve(users[2].id, make_vehicle(users[2], 'motorcycle').vehicle_id, target)
    assert third.pseudo_label == second.pseudo_label == 'Moto-2'

    grid = list_virtual_spots(layout.moto_section_id, caller_id=users[2].id)

    by_index = {spot['index']: spot for spot in grid['spots']}
    assert by_index[2]['reservation']['reservation_id'] == str(second.reservation_id)
    assert by_index[1]['reservation']['reservation_id'] == str(third.reservation_id)
    assert by_index[1]['is_caller_booked'] is True
    assert by_index[2]['is_caller_booked'] is False
    assert by_index[3]['status'] == 'available'
    assert grid['total_spots'] == 3
    assert grid['reserved_spots'] == 2
    assert grid['available_spots'] == 1


def test_grid_labels_and_statuses(layout, make_user, make_vehicle):
    user = make_user()
    reservation = allocator.reserve(
        user.id, make_vehicle(user, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id)
    )
    state_machine.confirm(reservation.reservation_id)

    grid = list_virtual_spots(layout.moto_section_id)

    assert [spot['label'] for spot in grid['spots']] == ['Moto-1', 'Moto-2', 'Moto-3']
    assert grid['spots'][0]['status'] == 'occupied'
    assert grid['spots'][0]['reservation']['plate_number'] == reservation.plate_number()
    assert grid['occupied_spots'] == 1


def test_grid_requires_capacity_section(layout):
    with pytest.raises(ValidationError):
        list_virtual_spots(layout.car_section_id)


def test_parked_occupants_lists_active_only(layout, make_user, make_vehicle):
    user = make_user()
    allocator.reserve(user.id, make_vehicle(user, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))
    allocator.assign_guest(
        SectionRef(layout.moto_section_id),
        Guest(name='Walk In', plate_number='GUEST01'),
        vehicle_type='motorcycle'
    )

    parked = list_parked_occupants(layout.moto_section_id)

    assert parked['total_parked'] == 1
    assert parked['parked_users'][0]['name'] == 'Walk In'
    assert parked['parked_users'][0]['is_guest'] is True
