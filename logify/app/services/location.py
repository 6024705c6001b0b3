"""
Location Lookup

Turns an actor's IP address into a "City, Region, Country" string using an
ip-api.com compatible JSON service. A failed lookup leaves the location empty.
"""

import ipaddress
import logging
from typing import Optional

import httpx

from config import ApplicationConfig

logger = logging.getLogger(__name__)


def is_public_ip(ip: Optional[str]) -> bool:
    if not ip:
        return False
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return not (address.is_private or address.is_loopback or address.is_reserved or address.is_link_local)


class LocationResolver:
    def __init__(self, url_template: Optional[str] = None, timeout: Optional[float] = None):
        self.url_template = ApplicationConfig.GEOLOCATION_URL if url_template is None else url_template
        self.timeout = ApplicationConfig.GEOLOCATION_TIMEOUT if timeout is None else timeout

    async def locate(self, ip: Optional[str]) -> Optional[str]:
        if not self.url_template or not is_public_ip(ip):
            return None

        url = self.url_template.format(ip=ip)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Location lookup failed for {ip}: {e}")
            return None

        if data.get("status", "success") != "success":
            return None

        parts = [data.get("city"), data.get("regionName"), data.get("country")]
        location = ", ".join(part for part in parts if part)
        return location or None
