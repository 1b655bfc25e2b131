from flask import Blueprint, request

from tappark_api.controllers.auth import role_required
from tappark_api.reservation_service import tokens
from tappark_api.reservation_service.errors import ValidationError
from tappark_api.utils.responses import success

attendant_bp = Blueprint('attendant', __name__)


def _scanned_token():
    data = request.get_json(silent=True) or {}
    if 'token' not in data:
        raise ValidationError('Missing required field: token')
    return data['token']


@attendant_bp.route('/attendant/scan', methods=['POST'])
@role_required()
def scan_token():
    reservation = tokens.validate_and_confirm(_scanned_token())
    return success(reservation.to_dict(), message=f'Parking started at {reservation.display_label}')


@attendant_bp.route('/attendant/resolve', methods=['POST'])
@role_required()
def resolve_token():
    """Look up what a code belongs to without confirming it."""
    reservation = tokens.resolve(_scanned_token())
    return success(reservation.to_dict())
