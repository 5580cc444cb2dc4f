"""Best-effort device position with the campus coordinate as fallback."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..core.constants import CAMPUS_LATITUDE, CAMPUS_LONGITUDE
from .model import GeoPoint

logger = logging.getLogger(__name__)

CAMPUS_FALLBACK = GeoPoint(latitude=CAMPUS_LATITUDE, longitude=CAMPUS_LONGITUDE)


class GeolocationUnavailable(Exception):
    """The device could not or would not report a position."""


class GeolocationSource(Protocol):
    def locate(self) -> GeoPoint:
        """Return the current position or raise GeolocationUnavailable."""

        raise NotImplementedError


class ClientCoordinates:
    """Position reported by the browser alongside a request."""

    def __init__(self, latitude, longitude):
        self._latitude = latitude
        self._longitude = longitude

    def locate(self) -> GeoPoint:
        if self._latitude is None or self._longitude is None:
            raise GeolocationUnavailable("no coordinates sent")
        try:
            lat = float(self._latitude)
            lng = float(self._longitude)
        except (TypeError, ValueError):
            raise GeolocationUnavailable(f"malformed coordinates {self._latitude!r}, {self._longitude!r}")
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
            raise GeolocationUnavailable(f"out-of-range coordinates {lat}, {lng}")
        return GeoPoint(latitude=lat, longitude=lng)


def locate_or_fallback(source: Optional[GeolocationSource]) -> GeoPoint:
    """Never fails: any error from ``source`` yields the campus coordinate."""

    if source is None:
        return CAMPUS_FALLBACK
    try:
        return source.locate()
    except GeolocationUnavailable as e:
        logger.debug("geolocation unavailable (%s), using campus coordinate", e)
    except Exception:
        logger.warning("geolocation source failed, using campus coordinate", exc_info=True)
    return CAMPUS_FALLBACK


def resolve_location(latitude, longitude) -> GeoPoint:
    """Coordinates reported by a client, or the campus fallback if absent/invalid."""
    return locate_or_fallback(ClientCoordinates(latitude, longitude))
