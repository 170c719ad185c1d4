"""Backend repositories - one class per REST resource.

Each repository wraps a shared HttpClient and converts JSON to model objects.
Failures surface as ApiError; AuthService converts them to AuthResult.
"""

from heritage_atlas.repositories.auth import AuthRepository, AuthResult, AuthService, AuthSession
from heritage_atlas.repositories.cultural_property import GeoEntityRepository
from heritage_atlas.repositories.movie import MediaCaptureRepository
from heritage_atlas.repositories.tag import TagRepository
from heritage_atlas.repositories.user import UserRepository

__all__ = [
    "GeoEntityRepository",
    "MediaCaptureRepository",
    "TagRepository",
    "UserRepository",
    "AuthRepository",
    "AuthService",
    "AuthSession",
    "AuthResult",
]
