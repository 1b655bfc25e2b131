from tappark_api.models.base import db, generate_uuid, utcnow, UUIDType


class Vehicle(db.Model):
    """Registered vehicle, managed by the vehicle registration service."""
    __tablename__ = 'vehicles'

    vehicle_id = db.Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = db.Column(UUIDType, db.ForeignKey('users.id'), nullable=False, index=True)
    plate_number = db.Column(db.String(20), nullable=False)
    vehicle_type = db.Column(db.String(20), nullable=False)  # 'car', 'motorcycle', 'bicycle', 'ebike'
    brand = db.Column(db.String(50))
    color = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'vehicle_id': str(self.vehicle_id),
            'plate_number': self.plate_number,
            'vehicle_type': self.vehicle_type,
            'brand': self.brand,
            'color': self.color
        }

    def __repr__(self):
        return f'<Vehicle {self.plate_number} ({self.vehicle_type})>'
