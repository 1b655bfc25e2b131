import logging

import click
from flask import Flask
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError

from tappark_api.config import Config
from tappark_api.controllers.attendant import attendant_bp
from tappark_api.controllers.auth import init_jwt
from tappark_api.controllers.parking_lot import parking_bp
from tappark_api.controllers.reservations import reservation_bp
from tappark_api.db.db import init_db, db
from tappark_api.reservation_service.errors import ReservationError, InfrastructureError
from tappark_api.utils.responses import failure

# Schema changes go through Flask-Migrate:
# 1 flask --app tappark_api.manage db migrate -m "your commit message"
# 2 flask --app tappark_api.manage db upgrade
# then seed the demo layout with: flask --app tappark_api.manage seed-parking

logger = logging.getLogger(__name__)


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    CORS(app)

    app.register_blueprint(parking_bp)
    app.register_blueprint(reservation_bp)
    app.register_blueprint(attendant_bp)

    init_jwt(app)

    # Initialize the database and migrations
    init_db(app)

    register_error_handlers(app)
    register_commands(app)

    @app.route("/")
    def index():
        return "Backend is alive!"

    return app


def register_error_handlers(app):
    @app.errorhandler(ReservationError)
    def handle_reservation_error(error):
        if error.status_code >= 500:
            logger.error("Request failed: %r", error)
        return failure(error)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception("Unhandled database error")
        return failure(InfrastructureError())


def register_commands(app):
    @app.cli.command('seed-parking')
    def seed_parking():
        """Create the demo parking area, sections and spots."""
        from tappark_api.db.initializers import run_all_initializers
        run_all_initializers()
        click.echo('Parking layout ready')

    @app.cli.command('reconcile-counters')
    @click.option('--repair', is_flag=True, help='Rewrite drifted counters and spot statuses.')
    def reconcile_counters(repair):
        """Compare section counters and spot statuses against live reservations."""
        from tappark_api.reservation_service.reconciliation import reconcile
        report = reconcile(repair=repair)
        for entry in report['sections']:
            click.echo(
                f"section {entry['section_name']}: reserved {entry['reserved_count']} "
                f"(expected {entry['expected_reserved']}), parked {entry['parked_count']} "
                f"(expected {entry['expected_parked']})"
            )
        for entry in report['spots']:
            click.echo(f"spot {entry['spot_id']}: {entry['status']} (expected {entry['expected_status']})")
        if not report['drifted']:
            click.echo('No drift found')
        elif repair:
            click.echo('Drift repaired')


if __name__ == '__main__':
    create_app().run(host="0.0.0.0", port=5001, debug=True)
