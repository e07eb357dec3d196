"""Core domain entities representing resolved media items."""

from .enums import APIProvider, Platform
from .track import Links, Metadata, PlatformTrack, Thumbnail, Track

__all__ = [
    # Enumerations
    "APIProvider",
    "Platform",
    # Track entities
    "Links",
    "Metadata",
    "PlatformTrack",
    "Thumbnail",
    "Track",
]
