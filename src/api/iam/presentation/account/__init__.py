from iam.presentation.account.routes import router

__all__ = ["router"]
