# gamebarfix/core/__init__.py
from .exceptions import Fatal, GamebarFixError, IdentityError, NotFoundError, RegFileError

__all__ = ["GamebarFixError", "Fatal", "NotFoundError", "IdentityError", "RegFileError"]
