from tappark_api.models.users import User
from tappark_api.models.vehicle import Vehicle
from tappark_api.models.parking_area import ParkingArea
from tappark_api.models.parking_section import ParkingSection
from tappark_api.models.parking_spot import ParkingSpot
from tappark_api.models.reservation import Reservation
