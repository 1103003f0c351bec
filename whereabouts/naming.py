"""Resource naming and offset encoding for pools kept in the cluster."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .iphelpers import ip_add_offset, ip_get_offset
from .types import IPAddress, IPReservation, sanitize_ip

UNNAMED_NETWORK = ""
"""The network name used when a configuration does not name its network."""

NAMESPACE_SYSTEM = "kube-system"
"""The namespace used when the cluster context names none."""

_log = logging.getLogger(__name__)

_OFFSET = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_SPACE = 1 << 64


@dataclass(frozen=True)
class IPAllocation:
    """The owner of one allocated offset in a pool."""

    container_id: str = ""
    pod_ref: str = ""


@dataclass(frozen=True)
class PoolIdentifier:
    """Which pool a range of a given network is kept in."""

    ip_range: str
    network_name: str = UNNAMED_NETWORK


def normalize_range(ip_range: str) -> str:
    """A range made fit for a resource name: colons and slashes become dashes."""
    if not ip_range:
        raise ValueError("cannot normalize an empty IP range")
    if ip_range.endswith(":"):
        ip_range += "0"
    return ip_range.replace(":", "-").replace("/", "-")


def ip_pool_name(identifier: PoolIdentifier) -> str:
    """The resource name of the pool for a range, prefixed by its network name."""
    normalized = normalize_range(identifier.ip_range)
    if identifier.network_name == UNNAMED_NETWORK:
        return normalized
    return f"{identifier.network_name}-{normalized}"


def _ip_text(ip: Optional[Union[IPAddress, str]]) -> str:
    if ip is None:
        return "<nil>"
    return str(sanitize_ip(str(ip)))


def normalize_ip(ip: Optional[Union[IPAddress, str]], network_name: str) -> str:
    """The resource name of a cluster-wide reservation of an address."""
    text = _ip_text(ip)
    if text.endswith(":"):
        text += "0"
        _log.debug("modified: %s", text)
    normalized = text.replace(":", "-")
    if network_name != UNNAMED_NETWORK:
        normalized = f"{network_name}-{normalized}"
    return normalized


def _parse_offset(text: str) -> int:
    if not _OFFSET.fullmatch(text):
        raise ValueError(f"invalid offset {text!r}")
    value = int(text, 10)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"offset {text!r} out of range")
    return value


def to_ip_reservation_list(
    allocations: Mapping[str, IPAllocation], first_ip: Union[IPAddress, str]
) -> List[IPReservation]:
    """Reservations for offset-keyed allocations; malformed offsets are skipped."""
    reservations: List[IPReservation] = []
    for offset, allocation in allocations.items():
        try:
            number = _parse_offset(offset)
        except ValueError as exc:
            _log.error("Error decoding ip offset (backend: kubernetes): %s", exc)
            continue
        reservations.append(
            IPReservation(
                ip=ip_add_offset(first_ip, number % _UINT64_SPACE),
                container_id=allocation.container_id,
                pod_ref=allocation.pod_ref,
            )
        )
    return reservations


def to_allocation_map(
    reservations: Iterable[IPReservation], first_ip: Union[IPAddress, str]
) -> Dict[str, IPAllocation]:
    """Allocations keyed by each reservation's decimal offset from first_ip."""
    allocations: Dict[str, IPAllocation] = {}
    for reservation in reservations:
        if reservation.ip is None:
            raise ValueError(f"reservation for pod {reservation.pod_ref} has no IP address")
        index = ip_get_offset(reservation.ip, first_ip)
        allocations[str(index)] = IPAllocation(
            container_id=reservation.container_id, pod_ref=reservation.pod_ref
        )
    return allocations


def namespace_from_context(namespace: str) -> str:
    """The namespace of a cluster context, defaulting to the system namespace."""
    return namespace or NAMESPACE_SYSTEM