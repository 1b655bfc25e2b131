from tappark_api.models.base import db, generate_uuid, utcnow, isoformat, UUIDType
from tappark_api.models.refs import SpotRef, SectionRef, Registered, Guest, SPOT, SECTION

RESERVED = 'reserved'
ACTIVE = 'active'
COMPLETED = 'completed'
LIVE_STATUSES = (RESERVED, ACTIVE)

# At most one reserved or active reservation per registered user
LIVE_USER_INDEX = 'uq_reservations_user_live'
LIVE_USER_WHERE = db.text("status IN ('reserved', 'active')")


class Reservation(db.Model):
    __tablename__ = 'reservations'
    __table_args__ = (
        db.CheckConstraint(
            "(target_kind = 'spot' AND spot_id IS NOT NULL) OR (target_kind = 'section' AND spot_id IS NULL)",
            name='ck_reservation_target'
        ),
        db.CheckConstraint(
            'user_id IS NOT NULL OR guest_name IS NOT NULL',
            name='ck_reservation_occupant'
        ),
        db.Index('ix_reservations_section_status', 'section_id', 'status'),
        db.Index('ix_reservations_user_status', 'user_id', 'status'),
        db.Index(
            LIVE_USER_INDEX, 'user_id', unique=True,
            sqlite_where=LIVE_USER_WHERE, postgresql_where=LIVE_USER_WHERE
        ),
    )

    reservation_id = db.Column(UUIDType, primary_key=True, default=generate_uuid)

    # Occupant: a registered user, or a walk-up guest
    user_id = db.Column(UUIDType, db.ForeignKey('users.id'), nullable=True)
    guest_name = db.Column(db.String(100), nullable=True)
    guest_contact = db.Column(db.String(100), nullable=True)
    guest_plate_number = db.Column(db.String(20), nullable=True)
    vehicle_id = db.Column(UUIDType, db.ForeignKey('vehicles.vehicle_id'), nullable=True)

    # Target: a discrete spot or a capacity section. section_id is always the owning section.
    target_kind = db.Column(db.String(10), nullable=False)  # 'spot', 'section'
    spot_id = db.Column(UUIDType, db.ForeignKey('parking_spots.spot_id'), nullable=True, index=True)
    section_id = db.Column(UUIDType, db.ForeignKey('parking_sections.section_id'), nullable=False)
    pseudo_label = db.Column(db.String(80), nullable=True)  # capacity bookings only, display use

    status = db.Column(db.String(20), nullable=False, default=RESERVED)  # 'reserved', 'active', 'completed'
    token = db.Column(db.String(128), unique=True, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    start_time = db.Column(db.DateTime, nullable=True)
    end_time = db.Column(db.DateTime, nullable=True)

    user = db.relationship('User', foreign_keys=[user_id], lazy=True)
    vehicle = db.relationship('Vehicle', foreign_keys=[vehicle_id], lazy=True)
    spot = db.relationship('ParkingSpot', foreign_keys=[spot_id], backref='reservations', lazy=True)
    section = db.relationship('ParkingSection', foreign_keys=[section_id], backref='reservations', lazy=True)

    @property
    def target(self):
        if self.target_kind == SPOT:
            return SpotRef(self.spot_id)
        return SectionRef(self.section_id)

    @target.setter
    def target(self, ref):
        self.target_kind = ref.kind
        if ref.kind == SPOT:
            self.spot_id = ref.spot_id
        else:
            self.spot_id = None
            self.section_id = ref.section_id

    @property
    def occupant(self):
        if self.user_id is not None:
            return Registered(self.user_id)
        return Guest(self.guest_name, self.guest_contact, self.guest_plate_number)

    @occupant.setter
    def occupant(self, value):
        if isinstance(value, Registered):
            self.user_id = value.user_id
        else:
            self.user_id = None
            self.guest_name = value.name
            self.guest_contact = value.contact
            self.guest_plate_number = value.plate_number

    @property
    def is_live(self):
        return self.status in LIVE_STATUSES

    @property
    def display_label(self):
        if self.target_kind == SECTION:
            return self.pseudo_label
        return self.spot.label if self.spot else None

    def occupant_name(self):
        if self.user_id is not None:
            return self.user.display_name if self.user else 'Unknown'
        return self.guest_name

    def plate_number(self):
        if self.vehicle is not None:
            return self.vehicle.plate_number
        return self.guest_plate_number

    def duration_minutes(self):
        if self.start_time and self.end_time:
            return int((self.end_time - self.start_time).total_seconds() // 60)
        return None

    def to_dict(self):
        return {
            'reservation_id': str(self.reservation_id),
            'status': self.status,
            'target': {
                'kind': self.target_kind,
                'spot_id': str(self.spot_id) if self.spot_id else None,
                'section_id': str(self.section_id)
            },
            'label': self.display_label,
            'pseudo_label': self.pseudo_label,
            'occupant': {
                'kind': 'registered' if self.user_id is not None else 'guest',
                'user_id': str(self.user_id) if self.user_id else None,
                'name': self.occupant_name(),
                'contact': self.guest_contact
            },
            'vehicle': self.vehicle.to_dict() if self.vehicle else None,
            'plate_number': self.plate_number(),
            'created_at': isoformat(self.created_at),
            'start_time': isoformat(self.start_time),
            'end_time': isoformat(self.end_time),
            'duration_minutes': self.duration_minutes()
        }

    def __repr__(self):
        return f'<Reservation {self.reservation_id} {self.target_kind} - {self.status}>'
