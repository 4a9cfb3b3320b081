from iam.presentation.mfa.routes import router

__all__ = ["router"]
