"""Typed failures raised by the reservation core.

Each error carries a stable machine-readable ``code`` that callers branch on,
a taxonomy ``category``, the HTTP status used by the API layer, and an
``action`` hint telling the caller whether to pick another resource, retry
later, fix the request, or do nothing.
"""

VALIDATION = 'VALIDATION'
NOT_FOUND = 'NOT_FOUND'
CONFLICT = 'CONFLICT'
TYPE_MISMATCH = 'TYPE_MISMATCH'
AUTHORIZATION = 'AUTHORIZATION'
INFRASTRUCTURE = 'INFRASTRUCTURE'

ACTION_FIX_REQUEST = 'fix_request'
ACTION_CHOOSE_ANOTHER = 'choose_another_resource'
ACTION_RETRY_LATER = 'retry_later'
ACTION_NONE = 'none'


class ReservationError(Exception):
    code = 'RESERVATION_ERROR'
    category = CONFLICT
    status_code = 400
    action = ACTION_NONE
    default_message = 'Reservation request failed'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        payload = {
            'success': False,
            'code': self.code,
            'category': self.category,
            'action': self.action,
            'message': self.message
        }
        if self.details:
            payload['data'] = self.details
        return payload

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.code}: {self.message}>'


class ValidationError(ReservationError):
    code = 'VALIDATION_ERROR'
    category = VALIDATION
    status_code = 400
    action = ACTION_FIX_REQUEST
    default_message = 'Invalid or missing request parameters'


class VehicleNotFound(ReservationError):
    code = 'VEHICLE_NOT_FOUND'
    category = NOT_FOUND
    status_code = 404
    default_message = 'Vehicle not found or does not belong to user'


class ResourceNotFound(ReservationError):
    code = 'RESOURCE_NOT_FOUND'
    category = NOT_FOUND
    status_code = 404
    default_message = 'Parking spot or section not found'


class ReservationNotFound(ReservationError):
    code = 'RESERVATION_NOT_FOUND'
    category = NOT_FOUND
    status_code = 404
    default_message = 'Reservation not found'


class TokenNotFound(ReservationError):
    code = 'TOKEN_NOT_FOUND'
    category = NOT_FOUND
    status_code = 404
    default_message = 'No reservation matches this code'


class VehicleTypeMismatch(ReservationError):
    code = 'VEHICLE_TYPE_MISMATCH'
    category = TYPE_MISMATCH
    status_code = 400
    action = ACTION_CHOOSE_ANOTHER

    def __init__(self, vehicle_type, resource_type, expected_type):
        super().__init__(
            f"This parking spot is for {resource_type} only. Your vehicle is a {vehicle_type}.",
            details={
                'vehicle_type': vehicle_type,
                'spot_type': resource_type,
                'expected_spot_type': expected_type
            }
        )


class ResourceUnavailable(ReservationError):
    code = 'RESOURCE_UNAVAILABLE'
    category = CONFLICT
    status_code = 409
    action = ACTION_CHOOSE_ANOTHER
    default_message = 'Parking resource is no longer available'


class UserAlreadyParked(ReservationError):
    code = 'USER_ALREADY_PARKED'
    category = CONFLICT
    status_code = 409
    action = ACTION_CHOOSE_ANOTHER
    default_message = 'You already have a reserved or active parking session'


class ConcurrentConflict(ReservationError):
    code = 'CONCURRENT_CONFLICT'
    category = CONFLICT
    status_code = 409
    action = ACTION_CHOOSE_ANOTHER
    default_message = 'Parking spot was just booked by another user. Please try a different spot.'


class StaleTransition(ReservationError):
    code = 'CONFLICT'
    category = CONFLICT
    status_code = 409
    action = ACTION_CHOOSE_ANOTHER
    default_message = 'Reservation was already transitioned by another request'


class AlreadyConfirmed(ReservationError):
    code = 'ALREADY_CONFIRMED'
    category = CONFLICT
    status_code = 409
    default_message = 'Reservation was already confirmed'


class Unauthorized(ReservationError):
    code = 'UNAUTHORIZED'
    category = AUTHORIZATION
    status_code = 401
    default_message = 'Missing or invalid access token'


class Forbidden(ReservationError):
    code = 'FORBIDDEN'
    category = AUTHORIZATION
    status_code = 403
    default_message = 'Insufficient permissions'


class InfrastructureError(ReservationError):
    code = 'INFRASTRUCTURE_ERROR'
    category = INFRASTRUCTURE
    status_code = 500
    action = ACTION_RETRY_LATER
    default_message = 'Service temporarily unavailable, please retry later'
