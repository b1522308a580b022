from .errors import FitChallengeError, AuthError, ChallengeError

__all__ = ["FitChallengeError", "AuthError", "ChallengeError"]
