from .user import User
from .challenge import Challenge
from .challenge_participant import ChallengeParticipant
from .exercise_log import ExerciseLog

__all__ = [
    "User",
    "Challenge", "ChallengeParticipant", "ExerciseLog",
]
