from .syncer import Syncer

__all__ = ["Syncer"]
