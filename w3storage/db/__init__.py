"""
Database access layer.
"""

from .client import DBClient
from .errors import DBError
from .memory import MemoryDBClient
from .models import AuthContext, AuthToken, Content, ImportCarInput, Upload, User
from .postgrest import PostgrestDBClient

__all__ = [
    "DBClient",
    "MemoryDBClient",
    "PostgrestDBClient",
    "AuthContext",
    "AuthToken",
    "Content",
    "ImportCarInput",
    "Upload",
    "User",
    "DBError",
]
