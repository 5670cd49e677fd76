"""Release controller: admission resolution and the ensure-* chain."""

from .adapter import FINALIZER_NAME, Adapter
from .admission import get_active_release_plan_admission, get_release_plan
from .controller import ReleaseReconciler, map_to_release_requests, setup_controller
from .errors import ReleaseError, from_store_error

__all__ = [
    "FINALIZER_NAME",
    "Adapter",
    "ReleaseError",
    "ReleaseReconciler",
    "from_store_error",
    "get_active_release_plan_admission",
    "get_release_plan",
    "map_to_release_requests",
    "setup_controller",
]
