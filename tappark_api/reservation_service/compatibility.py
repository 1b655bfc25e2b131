"""Vehicle class to spot type mapping used before any resource is locked."""
from tappark_api.reservation_service.errors import VehicleTypeMismatch

# Vehicle types not listed map to a spot type of the same name
VEHICLE_SPOT_TYPES = {
    'bicycle': 'bike',
    'ebike': 'bike',
    'e-bike': 'bike',
    'bike': 'bike',
    'motorbike': 'motorcycle',
    'motorcycle': 'motorcycle',
    'scooter': 'motorcycle',
    'car': 'car',
    'suv': 'car',
    'sedan': 'car',
}


def expected_spot_type(vehicle_type):
    normalized = (vehicle_type or '').strip().lower()
    return VEHICLE_SPOT_TYPES.get(normalized, normalized)


def is_compatible(vehicle_type, resource_type):
    return expected_spot_type(vehicle_type) == (resource_type or '').strip().lower()


def check_compatible(vehicle_type, resource_type):
    expected = expected_spot_type(vehicle_type)
    if expected != (resource_type or '').strip().lower():
        raise VehicleTypeMismatch(vehicle_type, resource_type, expected)
    return expected
