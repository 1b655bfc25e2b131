import pytest

from tappark_api.models import ParkingSection
from tappark_api.models.refs import SpotRef, SectionRef
from tappark_api.reservation_service import allocator, state_machine, tokens
from tappark_api.reservation_service.errors import AlreadyConfirmed, TokenNotFound


@pytest.fixture
def booking(layout, make_user, make_vehicle):
    user = make_user()
    return allocator.reserve(user.id, make_vehicle(user, 'motorcycle').vehicle_id, SectionRef(layout.moto_section_id))


def test_generated_tokens_are_url_safe_and_distinct():
    generated = {tokens.generate_token() for _ in range(50)}

    assert len(generated) == 50
    assert all(tokens.TOKEN_PATTERN.match(t) for t in generated)


def test_each_reservation_gets_its_own_token(layout, make_user, make_vehicle):
    first, second = make_user(), make_user()
    r1 = allocator.reserve(first.id, make_vehicle(first, 'car').vehicle_id, SpotRef(layout.car_spot_ids[0]))
    r2 = allocator.reserve(second.id, make_vehicle(second, 'car').vehicle_id, SpotRef(layout.car_spot_ids[1]))

    assert r1.token != r2.token


def test_resolve_returns_reservation(booking):
    assert tokens.resolve(booking.token).reservation_id == booking.reservation_id
    assert tokens.resolve(f'  {booking.token}\n').reservation_id == booking.reservation_id


@pytest.mark.parametrize('raw', [
    None,
    12345,
    '',
    'short',
    '{"qr_key": "abcdefghijklmnopqrstuvwxyz"}',
    'has spaces in the middle of it',
])
def test_malformed_tokens_are_rejected(app, raw):
    with pytest.raises(TokenNotFound):
        tokens.resolve(raw)


def test_unknown_token(app):
    with pytest.raises(TokenNotFound):
        tokens.resolve(tokens.generate_token())


def test_validate_and_confirm_activates(layout, booking, fresh):
    confirmed = tokens.validate_and_confirm(booking.token)

    assert confirmed.status == 'active'
    section = fresh(ParkingSection, layout.moto_section_id)
    assert (section.reserved_count, section.parked_count) == (0, 1)


def test_second_scan_is_already_confirmed(layout, booking, fresh):
    tokens.validate_and_confirm(booking.token)

    with pytest.raises(AlreadyConfirmed):
        tokens.validate_and_confirm(booking.token)

    assert fresh(ParkingSection, layout.moto_section_id).parked_count == 1


def test_scan_of_completed_reservation_is_already_confirmed(booking):
    token = booking.token
    state_machine.release(booking.reservation_id)

    with pytest.raises(AlreadyConfirmed):
        tokens.validate_and_confirm(token)
