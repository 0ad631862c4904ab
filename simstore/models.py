from sqlalchemy import func
from sqlalchemy.types import JSON
from .extensions import db

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


class Simulation(db.Model):
    __tablename__ = 'simulations'

    id = db.Column(db.String(255), primary_key=True)
    user_id = db.Column(db.String(255), nullable=False)
    env_id = db.Column(db.String(255), nullable=False)
    # Hex SHA-256 of the serialized payload, computed server-side
    data_hash = db.Column(db.String(64), nullable=False)
    data = db.Column(JSON)
    result = db.Column(db.Float, nullable=False)
    summary = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=func.current_timestamp())

    def to_dict(self):
        created_at = self.created_at
        if created_at is not None:
            created_at = created_at.strftime(TIMESTAMP_FORMAT)
        return {
            "id": self.id,
            "user_id": self.user_id,
            "env_id": self.env_id,
            "data_hash": self.data_hash,
            "data": self.data,
            "result": self.result,
            "summary": self.summary,
            "created_at": created_at,
        }

    def __repr__(self):
        return f'<Simulation {self.id}>'
