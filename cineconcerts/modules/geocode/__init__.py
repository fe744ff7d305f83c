"""
Geocode Module - Black Box Interface

Purpose: Turn free-text locations into coordinates
Interface: NominatimGeocoder.geocode()
Hidden: Nominatim query format and usage-policy headers
"""

from .nominatim import GeoResult, NominatimGeocoder

__all__ = ["GeoResult", "NominatimGeocoder"]
