from functools import wraps
from datetime import timedelta

from flask_jwt_extended import JWTManager, get_jwt, get_jwt_identity, verify_jwt_in_request

from tappark_api.reservation_service.errors import Forbidden, Unauthorized, ValidationError
from tappark_api.reservation_service.state_machine import Actor, STAFF_ROLES
from tappark_api.utils.responses import failure
from tappark_api.utils.validators import parse_uuid

# Tokens are issued by the authentication service; this API only validates them.


def init_jwt(app):
    """Initialize JWT validation with the Flask app"""
    app.config.setdefault('JWT_ACCESS_TOKEN_EXPIRES', timedelta(hours=app.config.get('JWT_ACCESS_TOKEN_HOURS', 1)))
    jwt = JWTManager(app)

    @jwt.unauthorized_loader
    def missing_token(reason):
        return failure(Unauthorized(reason))

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return failure(Unauthorized(reason))

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return failure(Unauthorized('Token has expired'))

    return jwt


def current_user_id():
    identity = get_jwt_identity()
    try:
        return parse_uuid(identity, 'user identity')
    except ValidationError:
        raise Forbidden('Token identity is not a user id')


def current_role():
    return get_jwt().get('role', 'User')


def current_actor():
    return Actor(current_user_id(), current_role())


def role_required(allowed_roles=STAFF_ROLES):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            if current_role() not in allowed_roles:
                raise Forbidden()
            return f(*args, **kwargs)
        return decorated_function
    return decorator
