from types import SimpleNamespace

import pytest
from flask_jwt_extended import create_access_token

from tappark_api.config import TestConfig
from tappark_api.db.db import db
from tappark_api.manage import create_app
from tappark_api.models import ParkingArea, ParkingSection, ParkingSpot, User, Vehicle


@pytest.fixture
def app(tmp_path):
    # File-backed so worker threads share one database
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'tappark.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'check_same_thread': False, 'timeout': 30}}

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make(role='User', first_name='Juan', last_name='Dela Cruz'):
        counter['n'] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            first_name=first_name,
            last_name=last_name,
            role=role
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_vehicle(app):
    counter = {'n': 0}

    def _make(user, vehicle_type='car'):
        counter['n'] += 1
        vehicle = Vehicle(
            user_id=user.id,
            plate_number=f"ABC{counter['n']:04d}",
            vehicle_type=vehicle_type,
            brand='Toyota',
            color='White'
        )
        db.session.add(vehicle)
        db.session.commit()
        return vehicle
    return _make


@pytest.fixture
def layout(app):
    """Area with car spots A-1..A-3, bike spots B-1..B-2 and a 3-slot motorcycle section."""
    area = ParkingArea(name='Main Campus Parking', location='PE Building')
    db.session.add(area)
    db.session.flush()

    car_section = ParkingSection(area_id=area.area_id, name='A', vehicle_type='car', mode='discrete', capacity=3)
    bike_section = ParkingSection(area_id=area.area_id, name='B', vehicle_type='bike', mode='discrete', capacity=2)
    moto_section = ParkingSection(area_id=area.area_id, name='Moto', vehicle_type='motorcycle',
                                  mode='capacity_only', capacity=3)
    db.session.add_all([car_section, bike_section, moto_section])
    db.session.flush()

    car_spots = [ParkingSpot(section_id=car_section.section_id, number=i, spot_type='car') for i in range(1, 4)]
    bike_spots = [ParkingSpot(section_id=bike_section.section_id, number=i, spot_type='bike') for i in range(1, 3)]
    db.session.add_all(car_spots + bike_spots)
    db.session.commit()

    return SimpleNamespace(
        area_id=area.area_id,
        car_section_id=car_section.section_id,
        bike_section_id=bike_section.section_id,
        moto_section_id=moto_section.section_id,
        car_spot_ids=[s.spot_id for s in car_spots],
        bike_spot_ids=[s.spot_id for s in bike_spots]
    )


@pytest.fixture
def auth_headers(app):
    def _headers(user_or_id, role='User'):
        user_id = getattr(user_or_id, 'id', user_or_id)
        token = create_access_token(identity=str(user_id), additional_claims={'role': role})
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def fresh(app):
    """Reload a row, bypassing anything cached in the session."""
    def _fresh(model, pk):
        db.session.expire_all()
        return db.session.get(model, pk)
    return _fresh
