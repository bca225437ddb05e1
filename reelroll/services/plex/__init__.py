from .auth import PlexAuthService
from .client import PlexClient
from .normalizer import normalize, parse_server_identity

__all__ = ["PlexAuthService", "PlexClient", "normalize", "parse_server_identity"]
