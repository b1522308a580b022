class FitChallengeError(Exception):
    """Base error for rule violations that end in a flash message."""

    category = "error"

    def __init__(self, message, category=None):
        super().__init__(message)
        self.message = message
        if category:
            self.category = category


class AuthError(FitChallengeError):
    pass


class ChallengeError(FitChallengeError):
    pass
