from .base_repository import Repository
from .binding import bind_value, read_value

__all__ = ["Repository", "bind_value", "read_value"]
