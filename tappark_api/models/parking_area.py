from tappark_api.models.base import db, generate_uuid, utcnow, UUIDType


class ParkingArea(db.Model):
    __tablename__ = 'parking_areas'

    area_id = db.Column(UUIDType, primary_key=True, default=generate_uuid)
    name = db.Column(db.String(100), nullable=False)
    location = db.Column(db.String(255))
    floors = db.Column(db.Integer, default=1)
    status = db.Column(db.String(20), default='active')  # 'active', 'inactive'
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    sections = db.relationship('ParkingSection', backref='area', lazy=True)

    def to_dict(self):
        return {
            'id': str(self.area_id),
            'name': self.name,
            'location': self.location,
            'floors': self.floors,
            'status': self.status
        }

    def __repr__(self):
        return f'<ParkingArea {self.name}>'
