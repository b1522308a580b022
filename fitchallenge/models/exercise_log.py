from datetime import datetime, date
from fitchallenge.extensions import db

class ExerciseLog(db.Model):
    __tablename__ = "exercise_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    challenge_id = db.Column(db.Integer, db.ForeignKey("challenges.id"), nullable=False, index=True)
    count = db.Column(db.Integer, nullable=False, default=1)
    activity = db.Column(db.String(150))
    logged_on = db.Column(db.Date, nullable=False, default=date.today)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship("User", back_populates="exercise_logs")
    challenge = db.relationship("Challenge", back_populates="exercise_logs")

    __table_args__ = (
        db.Index("idx_exercise_logs_user_challenge", "user_id", "challenge_id"),
    )
