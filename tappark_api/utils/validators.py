from uuid import UUID

from tappark_api.models.refs import SpotRef, SectionRef
from tappark_api.reservation_service.errors import ValidationError


def is_valid_uuid(value):
    try:
        UUID(str(value))
        return True
    except (ValueError, TypeError):
        return False


def parse_uuid(value, field):
    if isinstance(value, UUID):
        return value
    if value is None or value == '':
        raise ValidationError(f'Missing required field: {field}')
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise ValidationError(f'Invalid {field} format', details={'field': field})


def parse_resource_ref(data):
    """Build a SpotRef or SectionRef from a request payload.

    Exactly one of ``spot_id`` and ``section_id`` must be present.
    """
    spot_id = data.get('spot_id')
    section_id = data.get('section_id')
    if bool(spot_id) == bool(section_id):
        raise ValidationError('Provide exactly one of spot_id or section_id')
    if spot_id:
        return SpotRef(parse_uuid(spot_id, 'spot_id'))
    return SectionRef(parse_uuid(section_id, 'section_id'))


def parse_bool(value):
    return str(value).strip().lower() in ('1', 'true', 'yes')
