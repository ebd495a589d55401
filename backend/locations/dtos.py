"""
Data Transfer Objects passed between the location services and the views.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID


@dataclass(frozen=True)
class PointDTO:
    """Represents a geographic point (latitude, longitude)"""
    latitude: float
    longitude: float


@dataclass
class MirrorResult:
    """
    Outcome of the best-effort write into the geometry store.
    A failed mirror is a value, not an exception: the primary update already
    committed and the caller decides what to do with the drift.
    """
    SYNCED = 'synced'
    FAILED = 'failed'

    status: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    updated_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == self.SYNCED

    @classmethod
    def synced(cls, geo_point) -> 'MirrorResult':
        return cls(
            status=cls.SYNCED,
            latitude=geo_point.latitude,
            longitude=geo_point.longitude,
            updated_at=geo_point.updated_at,
        )

    @classmethod
    def failed(cls, error: str) -> 'MirrorResult':
        return cls(status=cls.FAILED, error=error)


@dataclass
class LocationUpdateResult:
    """Returned by LocationService.update_location()."""
    location_id: UUID
    user_location_id: UUID
    latitude: float
    longitude: float
    mirror: MirrorResult


@dataclass
class HeatmapTile:
    """Count of heatmap points falling into one geohash cell."""
    geohash: str
    latitude: float
    longitude: float
    count: int


@dataclass
class HeatmapDTO:
    """
    Heatmap payload: current positions of other users around a center.
    ``center`` is None when the requesting user has no location yet.
    """
    locations: List[dict] = field(default_factory=list)
    center: Optional[PointDTO] = None
    tiles: Optional[List[HeatmapTile]] = None
    message: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.locations)


@dataclass
class SyncStatus:
    """Comparison of a user's primary current location and their geo point."""
    IN_SYNC = 'in_sync'
    DRIFTED = 'drifted'
    MISSING = 'missing'
    NO_LOCATION = 'no_location'

    status: str
    primary: Optional[PointDTO] = None
    geo: Optional[PointDTO] = None
    geo_updated_at: Optional[datetime] = None

    @property
    def needs_repair(self) -> bool:
        return self.status in (self.DRIFTED, self.MISSING)
