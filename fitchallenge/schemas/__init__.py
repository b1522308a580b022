from .base import first_error
from .user import RegisterSchema, LoginSchema, PasswordChangeSchema, GoalSchema
from .challenge import ChallengeSchema, ActivitySchema, InviteCodeSchema, ParticipantSchema

__all__ = [
    "first_error",
    "RegisterSchema", "LoginSchema", "PasswordChangeSchema", "GoalSchema",
    "ChallengeSchema", "ActivitySchema", "InviteCodeSchema", "ParticipantSchema",
]
