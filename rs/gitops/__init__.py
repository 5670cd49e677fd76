from .binding import new_snapshot_environment_binding

__all__ = ["new_snapshot_environment_binding"]
