from datetime import datetime
from fitchallenge.extensions import db

STATUS_ACTIVE = "active"
STATUS_CLOSED = "closed"

class Challenge(db.Model):
    __tablename__ = "challenges"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    goal_count = db.Column(db.Integer, nullable=False)
    group_goal = db.Column(db.Integer, nullable=True)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('active','closed')"),
        nullable=False,
        default=STATUS_ACTIVE,
        index=True,
    )
    prize = db.Column(db.String(255))
    penalty = db.Column(db.String(255))
    invite_code = db.Column(db.String(32), unique=True, nullable=True)
    creator_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    creator = db.relationship("User", back_populates="created_challenges")
    participants = db.relationship(
        "ChallengeParticipant",
        back_populates="challenge",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    exercise_logs = db.relationship(
        "ExerciseLog",
        back_populates="challenge",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("idx_challenges_end_date", "end_date"),
    )

    @property
    def is_active(self):
        return self.status == STATUS_ACTIVE

    def is_owned_by(self, user) -> bool:
        return user is not None and self.creator_id == user.id

    def __repr__(self):
        return f"<Challenge {self.id} {self.title!r}>"
