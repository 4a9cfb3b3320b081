from iam.presentation.roles.routes import router

__all__ = ["router"]
