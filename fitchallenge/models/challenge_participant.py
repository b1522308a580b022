from datetime import datetime
from fitchallenge.extensions import db

class ChallengeParticipant(db.Model):
    __tablename__ = "challenge_participants"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    challenge_id = db.Column(db.Integer, db.ForeignKey("challenges.id"), nullable=False, index=True)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", back_populates="participations")
    challenge = db.relationship("Challenge", back_populates="participants")

    __table_args__ = (
        db.UniqueConstraint("user_id", "challenge_id", name="uq_challenge_participant"),
    )
