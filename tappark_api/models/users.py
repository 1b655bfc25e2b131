from tappark_api.models.base import db, generate_uuid, utcnow, UUIDType


class User(db.Model):
    """Account record owned by the authentication service; read here for occupant names."""
    __tablename__ = 'users'

    id = db.Column(UUIDType, primary_key=True, default=generate_uuid)
    email = db.Column(db.String(255), unique=True, nullable=False)
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    role = db.Column(db.String(20), default='User')  # 'User', 'Attendant', 'Admin'
    created_at = db.Column(db.DateTime, default=utcnow)

    vehicles = db.relationship('Vehicle', backref='owner', lazy=True)

    @property
    def display_name(self):
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or 'Unnamed Customer'

    def __repr__(self):
        return f'<User {self.email}>'
