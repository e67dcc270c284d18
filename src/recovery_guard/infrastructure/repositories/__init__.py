from .user_attribute_repository import UserAttributeRepository

__all__ = ["UserAttributeRepository"]
