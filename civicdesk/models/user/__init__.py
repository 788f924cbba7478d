from civicdesk.models.user.user import User

__all__ = ["User"]
