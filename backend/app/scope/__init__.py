from app.scope.context import VerificationScope

__all__ = ["VerificationScope"]
