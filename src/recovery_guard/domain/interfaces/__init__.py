"""Domain ports implemented by the infrastructure layer."""

from .infrastructure import IWindowStore, WindowDecision
from .repositories import IUserAttributeStore
from .services import IBlacklistOracle, IVerificationApi

__all__ = [
    "IBlacklistOracle",
    "IUserAttributeStore",
    "IVerificationApi",
    "IWindowStore",
    "WindowDecision",
]
