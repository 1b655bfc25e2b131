from tappark_api.models.base import db, generate_uuid, utcnow, UUIDType

SECTION_MODES = ('discrete', 'capacity_only')
SECTION_STATUSES = ('available', 'unavailable', 'maintenance')


class ParkingSection(db.Model):
    __tablename__ = 'parking_sections'
    __table_args__ = (
        db.CheckConstraint('parked_count >= 0', name='ck_section_parked_nonnegative'),
        db.CheckConstraint('reserved_count >= 0', name='ck_section_reserved_nonnegative'),
        db.CheckConstraint('parked_count + reserved_count <= capacity', name='ck_section_within_capacity'),
    )

    section_id = db.Column(UUIDType, primary_key=True, default=generate_uuid)
    area_id = db.Column(UUIDType, db.ForeignKey('parking_areas.area_id'), nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)  # 'A', 'Moto-1', etc.
    vehicle_type = db.Column(db.String(20), nullable=False)  # 'car', 'motorcycle', 'bike'
    mode = db.Column(db.String(20), nullable=False, default='discrete')  # 'discrete', 'capacity_only'
    capacity = db.Column(db.Integer, nullable=False, default=0)
    parked_count = db.Column(db.Integer, nullable=False, default=0)
    reserved_count = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='available')
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    spots = db.relationship('ParkingSpot', backref='section', lazy=True, order_by='ParkingSpot.number')

    @property
    def is_capacity_only(self):
        return self.mode == 'capacity_only'

    def used_count(self):
        return (self.parked_count or 0) + (self.reserved_count or 0)

    def available_count(self):
        return max(0, (self.capacity or 0) - self.used_count())

    def utilization(self):
        if not self.capacity:
            return 0.0
        return round(self.used_count() / self.capacity * 100, 1)

    def is_bookable(self):
        return self.status != 'unavailable' and self.available_count() > 0

    def to_dict(self):
        return {
            'section_id': str(self.section_id),
            'area_id': str(self.area_id),
            'name': self.name,
            'vehicle_type': self.vehicle_type,
            'mode': self.mode,
            'capacity': self.capacity,
            'parked': self.parked_count,
            'reserved': self.reserved_count,
            'available': self.available_count(),
            'status': self.status
        }

    def __repr__(self):
        return f'<ParkingSection {self.name} ({self.mode}) {self.used_count()}/{self.capacity}>'
