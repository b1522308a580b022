from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from fitchallenge.extensions import db

USERS_TABLE = "users"

class User(db.Model):
    __tablename__ = USERS_TABLE

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.String(20),
        db.CheckConstraint("role IN ('participant','admin')"),
        nullable=False,
        default="participant",
    )
    goal_exercises = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    created_challenges = db.relationship(
        "Challenge",
        back_populates="creator",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    participations = db.relationship(
        "ChallengeParticipant",
        back_populates="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    exercise_logs = db.relationship(
        "ExerciseLog",
        back_populates="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    # Helpers
    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == "admin"

    def __repr__(self):
        return f"<User {self.email}>"
