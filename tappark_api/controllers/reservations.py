from flask import Blueprint, request, Response
from flask_jwt_extended import jwt_required

from tappark_api.controllers.auth import current_actor, current_user_id, role_required
from tappark_api.db.db import db
from tappark_api.models.refs import Guest
from tappark_api.models.reservation import Reservation, LIVE_STATUSES
from tappark_api.reservation_service import allocator, state_machine
from tappark_api.reservation_service.errors import ReservationNotFound, ValidationError
from tappark_api.utils.qr import render_token_png, render_token_data_url
from tappark_api.utils.responses import success
from tappark_api.utils.validators import parse_uuid, parse_resource_ref

reservation_bp = Blueprint('reservations', __name__)


def _json_body():
    data = request.get_json(silent=True)
    if not data:
        raise ValidationError('No data provided')
    return data


def _with_token(reservation):
    data = reservation.to_dict()
    data['token'] = reservation.token
    data['token_image'] = render_token_data_url(reservation.token)
    return data


def _visible_reservation(reservation_id):
    reservation = db.session.get(Reservation, parse_uuid(reservation_id, 'reservation_id'))
    actor = current_actor()
    if reservation is None or (not actor.is_staff and reservation.user_id != actor.user_id):
        raise ReservationNotFound()
    return reservation


@reservation_bp.route('/reservations', methods=['POST'])
@jwt_required()
def create_reservation():
    data = _json_body()
    vehicle_id = parse_uuid(data.get('vehicle_id'), 'vehicle_id')
    target = parse_resource_ref(data)

    reservation = allocator.reserve(current_user_id(), vehicle_id, target)
    return success(_with_token(reservation), message=f'Reserved {reservation.display_label}', status=201)


@reservation_bp.route('/reservations/guest', methods=['POST'])
@role_required()
def create_guest_reservation():
    """Walk-up guest parked by an attendant; the session is active immediately."""
    data = _json_body()
    target = parse_resource_ref(data)
    guest = Guest(
        name=(data.get('name') or '').strip(),
        contact=data.get('contact'),
        plate_number=(data.get('plate_number') or '').strip()
    )

    reservation = allocator.assign_guest(target, guest, vehicle_type=data.get('vehicle_type'))
    return success(_with_token(reservation), message=f'Guest assigned to {reservation.display_label}', status=201)


@reservation_bp.route('/reservations/current', methods=['GET'])
@jwt_required()
def get_current_reservation():
    reservation = Reservation.query.filter(
        Reservation.user_id == current_user_id(),
        Reservation.status.in_(LIVE_STATUSES)
    ).order_by(Reservation.created_at.desc()).first()
    if not reservation:
        return success(None, message='No active reservation')
    return success(_with_token(reservation))


@reservation_bp.route('/reservations/<reservation_id>', methods=['GET'])
@jwt_required()
def get_reservation(reservation_id):
    reservation = _visible_reservation(reservation_id)
    return success(reservation.to_dict())


@reservation_bp.route('/reservations/<reservation_id>/qr', methods=['GET'])
@jwt_required()
def get_reservation_qr(reservation_id):
    reservation = _visible_reservation(reservation_id)
    if not reservation.is_live:
        raise ValidationError(f'Reservation is {reservation.status}; no code to show')
    return Response(render_token_png(reservation.token), mimetype='image/png')


@reservation_bp.route('/reservations/<reservation_id>/end', methods=['PUT'])
@jwt_required()
def end_reservation(reservation_id):
    reservation = state_machine.end(parse_uuid(reservation_id, 'reservation_id'), current_actor())
    return success(reservation.to_dict(), message='Parking session ended')


@reservation_bp.route('/reservations/<reservation_id>/release', methods=['PUT'])
@jwt_required()
def release_reservation(reservation_id):
    reservation = state_machine.release(parse_uuid(reservation_id, 'reservation_id'), current_actor())
    return success(reservation.to_dict(), message='Reservation released')
