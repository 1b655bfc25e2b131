# parking_lot.py
from flask import Blueprint, request
from flask_jwt_extended import verify_jwt_in_request

from tappark_api.controllers.auth import current_user_id, role_required
from tappark_api.models.refs import SpotRef, SectionRef
from tappark_api.reservation_service import registry, virtual_spots
from tappark_api.reservation_service.errors import ValidationError
from tappark_api.utils.responses import success
from tappark_api.utils.validators import parse_uuid, parse_bool

parking_bp = Blueprint('parking', __name__)


def _optional_caller_id():
    # Listing is public; a valid token only adds the caller's booking markers
    if verify_jwt_in_request(optional=True):
        return current_user_id()
    return None


@parking_bp.route('/parking/areas', methods=['GET'])
def get_areas():
    return success(registry.list_areas())


@parking_bp.route('/parking/areas/<area_id>/available', methods=['GET'])
def get_available(area_id):
    area_id = parse_uuid(area_id, 'area_id')
    resources = registry.list_available(
        area_id,
        vehicle_type=request.args.get('vehicle_type'),
        include_all=parse_bool(request.args.get('include_all', 'false'))
    )
    return success(resources, count=len(resources))


@parking_bp.route('/parking/areas/<area_id>/capacity-status', methods=['GET'])
def get_capacity_status(area_id):
    area_id = parse_uuid(area_id, 'area_id')
    return success(registry.capacity_status(area_id, caller_id=_optional_caller_id()))


@parking_bp.route('/parking/spots/<spot_id>/status', methods=['GET'])
def get_spot_status(spot_id):
    return success(registry.get_status(SpotRef(parse_uuid(spot_id, 'spot_id'))))


@parking_bp.route('/parking/sections/<section_id>/status', methods=['GET'])
def get_section_status(section_id):
    return success(registry.get_status(SectionRef(parse_uuid(section_id, 'section_id'))))


@parking_bp.route('/parking/spots/<spot_id>/status', methods=['PUT'])
@role_required()
def update_spot_status(spot_id):
    spot_id = parse_uuid(spot_id, 'spot_id')
    spot = registry.set_spot_status(spot_id, _required_status())
    return success(spot, message=f"Spot status updated to {spot['status']}")


@parking_bp.route('/parking/sections/<section_id>/status', methods=['PUT'])
@role_required()
def update_section_status(section_id):
    section_id = parse_uuid(section_id, 'section_id')
    section = registry.set_section_status(section_id, _required_status())
    return success(section, message=f"Section status updated to {section['status']}")


def _required_status():
    data = request.get_json(silent=True) or {}
    status = data.get('status')
    if not status:
        raise ValidationError('Missing required field: status')
    return status


@parking_bp.route('/parking/sections/<section_id>/virtual-spots', methods=['GET'])
def get_virtual_spots(section_id):
    section_id = parse_uuid(section_id, 'section_id')
    return success(virtual_spots.list_virtual_spots(section_id, caller_id=_optional_caller_id()))


@parking_bp.route('/parking/sections/<section_id>/parked-users', methods=['GET'])
@role_required()
def get_parked_users(section_id):
    section_id = parse_uuid(section_id, 'section_id')
    return success(virtual_spots.list_parked_occupants(section_id))
