"""Genius Hub API access and zone normalization."""

from genius.client import GeniusHubClient
from genius.normalize import ZoneSnapshot, parse_zone_data

__all__ = ["GeniusHubClient", "ZoneSnapshot", "parse_zone_data"]
