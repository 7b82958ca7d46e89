"""
Server catalog module
"""

import random
from typing import Optional, List
from .constants import MOCK_SERVERS, DEFAULT_SERVER_ID
from .types import Server
import logging

logger = logging.getLogger(__name__)


class ServerCatalog:
    """Static catalog of mock servers"""

    def __init__(self, servers: Optional[List[Server]] = None,
                 default_id: str = DEFAULT_SERVER_ID,
                 rng: Optional[random.Random] = None):
        self.servers = list(servers) if servers else list(MOCK_SERVERS)
        self.default_id = default_id
        self.rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self.servers)

    def __contains__(self, server_id: str) -> bool:
        return self.get(server_id) is not None

    @property
    def default(self) -> Server:
        """Default server, or the first one if the default id is unknown"""
        return self.get(self.default_id) or self.servers[0]

    def get(self, server_id: Optional[str]) -> Optional[Server]:
        """Look up a server by id"""
        for server in self.servers:
            if server.id == server_id:
                return server
        return None

    def get_random_server(self) -> Optional[Server]:
        """Get a random server from the catalog"""
        if not self.servers:
            return None
        return self.rng.choice(self.servers)

    def get_best_server(
        self, exclude: Optional[str] = None
    ) -> Optional[Server]:
        """Get the least loaded server, ties broken by ping"""
        available_servers = self.servers

        if exclude:
            available_servers = [
                server for server in available_servers
                if server.id != exclude
            ]

        if not available_servers:
            return None

        return min(available_servers, key=lambda s: (s.load, s.ping))

    def extend(self, servers: List[Server]):
        """Add servers, replacing existing entries with the same id"""
        for server in servers:
            existing = self.get(server.id)
            if existing:
                self.servers[self.servers.index(existing)] = server
            else:
                self.servers.append(server)
        logger.debug(f"Catalog now holds {len(self.servers)} servers")

    def get_all_servers(self) -> List[Server]:
        """Get all available servers"""
        return self.servers.copy()

    def find_servers(
        self, country: Optional[str] = None,
        feature: Optional[str] = None,
        premium: Optional[bool] = None
    ) -> List[Server]:
        """Find servers matching criteria"""
        filtered_servers = self.servers

        if country:
            filtered_servers = [
                s for s in filtered_servers
                if country.lower() in s.country.lower() or
                country.lower() in s.city.lower()
            ]

        if feature:
            filtered_servers = [
                s for s in filtered_servers
                if any(feature.lower() == f.lower() for f in s.features)
            ]

        if premium is not None:
            filtered_servers = [
                s for s in filtered_servers if s.premium == premium
            ]

        return filtered_servers
