from .user_attribute import UserAttribute

__all__ = ["UserAttribute"]
