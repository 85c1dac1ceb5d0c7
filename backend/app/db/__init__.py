from backend.app.db.base import Base, UTCDateTime

__all__ = [
    "Base",
    "UTCDateTime",
]
