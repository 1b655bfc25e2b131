from tappark_api.models.base import db, generate_uuid, utcnow, UUIDType

SPOT_STATUSES = ('available', 'reserved', 'occupied', 'maintenance')


class ParkingSpot(db.Model):
    __tablename__ = 'parking_spots'
    __table_args__ = (
        db.UniqueConstraint('section_id', 'number', name='uq_spot_section_number'),
    )

    spot_id = db.Column(UUIDType, primary_key=True, default=generate_uuid)
    section_id = db.Column(UUIDType, db.ForeignKey('parking_sections.section_id'), nullable=False, index=True)
    number = db.Column(db.Integer, nullable=False)
    spot_type = db.Column(db.String(20), nullable=False)  # 'car', 'bike', 'motorcycle'
    status = db.Column(db.String(20), nullable=False, default='available')
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    @property
    def label(self):
        return f'{self.section.name}-{self.number}' if self.section else str(self.number)

    def to_dict(self):
        return {
            'spot_id': str(self.spot_id),
            'section_id': str(self.section_id),
            'section_name': self.section.name if self.section else None,
            'number': self.number,
            'label': self.label,
            'spot_type': self.spot_type,
            'status': self.status
        }

    def __repr__(self):
        return f'<ParkingSpot {self.number} - {self.status}>'
