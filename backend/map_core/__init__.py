"""
Client-side workflow for the travel memory map: location store, category filter,
map surface, location form and detail panel, plus stats and image export.
"""
from map_core.location import Location, UserSession
from map_core.workspace import MapWorkspace

__all__ = ["Location", "MapWorkspace", "UserSession"]
