"""Address arithmetic and range helpers for IPv4 and IPv6."""

from __future__ import annotations

import ipaddress
from ipaddress import (
    IPv4Address,
    IPv4Interface,
    IPv4Network,
    IPv6Address,
    IPv6Interface,
    IPv6Network,
)
from typing import Optional, Tuple, Union

IPAddress = Union[IPv4Address, IPv6Address]
IPNetwork = Union[IPv4Network, IPv6Network]
AddressLike = Union[IPv4Address, IPv6Address, str, bytes]
NetworkLike = Union[IPv4Network, IPv6Network, IPv4Interface, IPv6Interface, str]

_V4_MAPPED_PREFIX = 0xFFFF << 32
_V4_SPACE = 1 << 32
_V6_SPACE = 1 << 128
_UINT64_SPACE = 1 << 64


def _address(ip: AddressLike) -> IPAddress:
    """Parse an address; IPv4-mapped IPv6 addresses come back as IPv4."""
    if isinstance(ip, (IPv4Address, IPv6Address)):
        addr = ip
    elif isinstance(ip, (str, bytes)):
        addr = ipaddress.ip_address(ip)
    else:
        raise TypeError(f"cannot interpret {ip!r} as an IP address")
    if isinstance(addr, IPv6Address) and addr.ipv4_mapped is not None:
        return addr.ipv4_mapped
    return addr


def _network(network: NetworkLike) -> IPNetwork:
    if isinstance(network, (IPv4Network, IPv6Network)):
        return network
    if isinstance(network, (IPv4Interface, IPv6Interface)):
        return network.network
    if isinstance(network, str):
        return ipaddress.ip_network(network, strict=False)
    raise TypeError(f"cannot interpret {network!r} as an IP network")


def _to16(addr: IPAddress) -> int:
    """The address as a 128-bit integer, IPv4 in its mapped form."""
    if isinstance(addr, IPv4Address):
        return _V4_MAPPED_PREFIX | int(addr)
    return int(addr)


def _from16(value: int) -> IPAddress:
    value %= _V6_SPACE
    if value >> 32 == 0xFFFF:
        return IPv4Address(value & 0xFFFFFFFF)
    return IPv6Address(value)


def compare_ips(ip_x: AddressLike, ip_y: AddressLike) -> int:
    """Return -1, 0 or 1 as ip_x is smaller than, equal to or larger than ip_y."""
    x = _to16(_address(ip_x))
    y = _to16(_address(ip_y))
    return (x > y) - (x < y)


def is_ip_in_range(
    ip: Optional[AddressLike],
    start: Optional[AddressLike],
    end: Optional[AddressLike],
) -> bool:
    """Whether ip lies in the inclusive range from start to end."""
    if ip is None or start is None or end is None:
        raise ValueError(
            "cannot determine if IP is in range, either of the values is '<nil>', "
            f"in: {ip}, start: {start}, end: {end}"
        )
    return compare_ips(ip, start) >= 0 and compare_ips(ip, end) <= 0


def network_ip(network: NetworkLike) -> IPAddress:
    """The network address of a subnet."""
    return _address(_network(network).network_address)


def subnet_broadcast_ip(network: NetworkLike) -> IPAddress:
    """The broadcast (all host bits set) address of a subnet."""
    return _address(_network(network).broadcast_address)


def has_usable_ips(network: NetworkLike) -> bool:
    """Whether the subnet has addresses besides its network and broadcast IP."""
    net = _network(network)
    return net.max_prefixlen - net.prefixlen > 1


def _require_usable(net: IPNetwork) -> None:
    if not has_usable_ips(net):
        raise ValueError(
            f"net mask is too short, subnet {net} has no usable IP addresses, it is too small"
        )


def first_usable_ip(network: NetworkLike) -> IPAddress:
    """The first address after the network address."""
    net = _network(network)
    _require_usable(net)
    return inc_ip(network_ip(net))


def last_usable_ip(network: NetworkLike) -> IPAddress:
    """The last address before the broadcast address."""
    net = _network(network)
    _require_usable(net)
    return dec_ip(subnet_broadcast_ip(net))


def _step(ip: AddressLike, delta: int) -> IPAddress:
    addr = _address(ip)
    if isinstance(addr, IPv4Address):
        return IPv4Address((int(addr) + delta) % _V4_SPACE)
    return IPv6Address((int(addr) + delta) % _V6_SPACE)


def inc_ip(ip: AddressLike) -> IPAddress:
    """The next address; wraps around after the all-ones address."""
    return _step(ip, 1)


def dec_ip(ip: AddressLike) -> IPAddress:
    """The previous address; wraps around before the all-zeros address."""
    return _step(ip, -1)


def is_ipv4(ip: AddressLike) -> bool:
    """Whether the address is IPv4, including IPv4-mapped IPv6 notation."""
    return isinstance(_address(ip), IPv4Address)


def ip_get_offset(ip1: AddressLike, ip2: AddressLike) -> int:
    """The absolute distance between two addresses of the same family, as a 64-bit value."""
    a = _address(ip1)
    b = _address(ip2)
    if isinstance(a, IPv4Address) and not isinstance(b, IPv4Address):
        raise ValueError(f"cannot calculate offset between IPv4 ({a}) and IPv6 address ({b})")
    if not isinstance(a, IPv4Address) and isinstance(b, IPv4Address):
        raise ValueError(f"cannot calculate offset between IPv6 ({a}) and IPv4 address ({b})")
    return abs(_to16(a) - _to16(b)) % _UINT64_SPACE


def ip_add_offset(ip: AddressLike, offset: int) -> Optional[IPAddress]:
    """The address plus offset, or None when an IPv4 offset is out of range."""
    addr = _address(ip)
    if isinstance(addr, IPv4Address) and offset >= _V4_SPACE - 1:
        return None
    return _from16(_to16(addr) + (offset % _UINT64_SPACE))


def get_ip_range(
    network: NetworkLike,
    range_start: Optional[AddressLike] = None,
    range_end: Optional[AddressLike] = None,
) -> Tuple[IPAddress, IPAddress]:
    """The first and last assignable address of a subnet.

    A range start or end inside the usable span replaces the corresponding
    bound; otherwise it is silently ignored. The end is checked against the
    possibly narrowed start, so an end below the start is ignored too.
    """
    net = _network(network)
    first = first_usable_ip(net)
    last = last_usable_ip(net)
    if range_start is not None and is_ip_in_range(range_start, first, last):
        first = _address(range_start)
    if range_end is not None and is_ip_in_range(range_end, first, last):
        last = _address(range_end)
    return first, last