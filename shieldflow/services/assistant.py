"""
Boundary glue between recommendations and the connection log
"""

from typing import Tuple

from ..core.connection_simulator import ConnectionSimulator
from ..core.log_sink import LogSink
from ..core.server_catalog import ServerCatalog
from ..core.types import LogEntry, Recommendation, Server, Severity


def describe_recommendation(catalog: ServerCatalog, query: str,
                            recommendation: Recommendation
                            ) -> Tuple[str, Severity]:
    """Message and severity shown to the user for a recommendation"""
    server = resolve_server(catalog, recommendation)

    if recommendation.fallback:
        return (
            f"AI recommendation unavailable, using {server.country}",
            Severity.WARNING
        )
    return f'AI Recommended: {server.country} for "{query}"', Severity.SUCCESS


def record_recommendation(log_sink: LogSink, catalog: ServerCatalog,
                          query: str,
                          recommendation: Recommendation) -> LogEntry:
    """Log a single entry describing the recommendation"""
    message, severity = describe_recommendation(catalog, query, recommendation)
    return log_sink.record(message, severity)


def resolve_server(catalog: ServerCatalog,
                   recommendation: Recommendation) -> Server:
    return catalog.get(recommendation.recommended_server_id) or catalog.default


def apply_recommendation(simulator: ConnectionSimulator,
                         server: Server) -> bool:
    """Select a recommended server; only possible while disconnected"""
    if not simulator.select_server(server):
        return False
    simulator.log(
        f"Applied AI recommendation: {server.country}", Severity.SUCCESS
    )
    return True
