import logging
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
import os

from tappark_api.reservation_service.errors import InfrastructureError

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), 'migrations')


def init_db(app):
    database_url = app.config['SQLALCHEMY_DATABASE_URI']

    # Pool sizing only applies to server databases; SQLite uses its own pool classes
    if not database_url.startswith('sqlite'):
        engine_options = dict(app.config.get('POOL_OPTIONS', {}))
        engine_options.update(app.config.get('SQLALCHEMY_ENGINE_OPTIONS', {}))
        app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options

    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)


@contextmanager
def transaction():
    """Run a unit of work as one all-or-nothing database transaction.

    Business errors roll back and propagate unchanged. Driver and database
    failures roll back and are re-raised as an opaque InfrastructureError.
    The session itself is removed at app-context teardown, which returns the
    connection to the pool on every exit path.
    """
    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Transaction rolled back after database error: %s", e.__class__.__name__)
        raise InfrastructureError() from e
    except Exception:
        db.session.rollback()
        raise
