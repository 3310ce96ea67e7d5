from .base import TrackerBackend  # noqa: F401
from .embedded import EmbeddedBackend  # noqa: F401
from .remote import RemoteBackend  # noqa: F401
from .selector import create_backend, resolve_remote_config  # noqa: F401
