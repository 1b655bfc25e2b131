"""Reservation tokens: the only payload of the QR code an attendant scans."""
import logging
import re
import secrets

from tappark_api.db.db import db, transaction
from tappark_api.models.reservation import Reservation, RESERVED
from tappark_api.reservation_service import state_machine
from tappark_api.reservation_service.errors import TokenNotFound, AlreadyConfirmed

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24

# Bare URL-safe tokens only. Legacy codes carried JSON such as {"qr_key": ...}
# and are rejected rather than parsed.
TOKEN_PATTERN = re.compile(r'^[A-Za-z0-9_-]{16,128}$')


def generate_token():
    return secrets.token_urlsafe(TOKEN_BYTES)


def mint(reservation):
    """Bind a fresh token to a reservation that has not been flushed yet."""
    token = generate_token()
    reservation.token = token
    return token


def normalize(raw_token):
    if not isinstance(raw_token, str):
        raise TokenNotFound()
    token = raw_token.strip()
    if not TOKEN_PATTERN.match(token):
        logger.warning("Rejected malformed reservation token (length %d)", len(token))
        raise TokenNotFound()
    return token


def resolve(raw_token, for_update=False):
    token = normalize(raw_token)
    query = Reservation.query.filter_by(token=token)
    if for_update:
        query = query.with_for_update().populate_existing()
    reservation = query.first()
    if not reservation:
        raise TokenNotFound()
    return reservation


def validate_and_confirm(raw_token):
    """Attendant scan: resolve the token and move its reservation to active."""
    with transaction():
        reservation = resolve(raw_token, for_update=True)
        if reservation.status != RESERVED:
            raise AlreadyConfirmed(
                f'Reservation is already {reservation.status}',
                details={'reservation_id': str(reservation.reservation_id), 'status': reservation.status}
            )
        state_machine.apply_in_transaction(reservation.reservation_id, state_machine.CONFIRM)

    logger.info("Reservation %s confirmed by token scan", reservation.reservation_id)
    return db.session.get(Reservation, reservation.reservation_id)
