"""WiFi network tools - Query and inspect WiFi networks (read-only).

Tools: r1.wifi_networks.query, r1.wifi_network.get
"""

from typing import Any, Dict

from pydantic import BaseModel, Field

from .base import QueryArgs, query_payload, tool_info
from ..session import R1Session


class ArgsWifiNetworksQuery(QueryArgs):
    pass


class ArgsWifiNetworkGet(BaseModel):
    network_id: str = Field(min_length=1, description="WiFi network ID")


async def handle_wifi_networks_query(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsWifiNetworksQuery.model_validate(args)
    payload = query_payload(
        parsed,
        session.cfg,
        default_fields=["id", "name", "ssid", "vlan", "nwSubType", "securityProtocol", "clientCount", "apCount"],
    )
    return await session.call("POST", "/wifiNetworks/query", operation="Query WiFi networks", json=payload)


async def handle_wifi_network_get(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsWifiNetworkGet.model_validate(args)
    return await session.call("GET", f"/wifiNetworks/{parsed.network_id}", operation="Get WiFi network")


TOOLS_INFO = [
    tool_info(
        "r1.wifi_networks.query",
        "Query WiFi networks (SSIDs) with search and paging. Returns {data, totalCount}.",
        ArgsWifiNetworksQuery,
    ),
    tool_info(
        "r1.wifi_network.get",
        "Get the full configuration of one WiFi network, including WLAN security and advanced settings.",
        ArgsWifiNetworkGet,
    ),
]
