"""Configuration and reservation types for the IPAM plugin."""

from __future__ import annotations

import ipaddress
import json
from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Dict, List, Mapping, Optional, Union

IPAddress = Union[IPv4Address, IPv6Address]

DEFAULT_LEADER_LEASE_DURATION = 1500
DEFAULT_LEADER_RENEW_DEADLINE = 1000
DEFAULT_LEADER_RETRY_PERIOD = 500
ADD_TIME_LIMIT = timedelta(minutes=2)
DEL_TIME_LIMIT = timedelta(minutes=1)
DEFAULT_OVERLAPPING_IPS_FEATURES = True
DEFAULT_SLEEP_FOR_RACE = 0


class Operation(IntEnum):
    """The kind of change made to an IP allocation."""

    ALLOCATE = 0
    DEALLOCATE = 1


_MISSING = object()


def _parse_lenient_ipv4(address: str) -> Optional[IPv4Address]:
    """Dotted-quad IPv4 where octets may carry leading zeros, read as decimal."""
    parts = address.split(".")
    if len(parts) != 4:
        return None
    octets = []
    for part in parts:
        if not part or not (part.isascii() and part.isdigit()):
            return None
        value = int(part, 10)
        if value > 0xFF:
            return None
        octets.append(value)
    return IPv4Address(bytes(octets))


def sanitize_ip(address: str) -> IPAddress:
    """Parse an address leniently; IPv4 octets may have leading zeros.

    IPv4-mapped IPv6 addresses come back as IPv4. Raises ValueError when the
    text is not an address.
    """
    error = ValueError(f"{address} is not a valid IP address")
    if not isinstance(address, str) or "%" in address:
        raise error
    try:
        parsed: Optional[IPAddress] = ipaddress.ip_address(address)
    except ValueError:
        parsed = _parse_lenient_ipv4(address)
    if parsed is None:
        raise error
    if isinstance(parsed, IPv6Address) and parsed.ipv4_mapped is not None:
        return parsed.ipv4_mapped
    return parsed


def _backwards_compatible_ip(address: Optional[str]) -> Optional[IPAddress]:
    """The parsed address, or None when the text is absent or not an address."""
    if not address:
        return None
    try:
        return sanitize_ip(address)
    except ValueError:
        return None


def _field(data: Mapping[str, Any], key: str) -> Any:
    """Look a key up exactly, then case-insensitively."""
    if key in data:
        return data[key]
    folded = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == folded:
            return value
    return _MISSING


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _str(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = _field(data, key)
    if value is _MISSING or value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {value!r}")
    return value


def _int(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = _field(data, key)
    if value is _MISSING or value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _bool(data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = _field(data, key)
    if value is _MISSING or value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {value!r}")
    return value


def _str_list(data: Mapping[str, Any], key: str) -> List[str]:
    value = _field(data, key)
    if value is _MISSING or value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"field {key!r} must be a list of strings, got {value!r}")
    return list(value)


def _object_list(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = _field(data, key)
    if value is _MISSING or value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list, got {value!r}")
    return [_mapping(item, f"entry of {key!r}") for item in value]


def _strict_ip(data: Mapping[str, Any], key: str) -> Optional[IPAddress]:
    """An address field that must hold a valid address when it is set."""
    text = _str(data, key)
    if not text:
        return None
    try:
        return sanitize_ip(text)
    except ValueError as exc:
        raise ValueError(f"invalid IP address in field {key!r}: {text}") from exc


@dataclass
class KubernetesConfig:
    """Where to find the cluster the plugin talks to."""

    kubeconfig_path: str = ""
    k8s_api_root: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KubernetesConfig":
        data = _mapping(data, "kubernetes configuration")
        return cls(
            kubeconfig_path=_str(data, "kubeconfig"),
            k8s_api_root=_str(data, "k8s_api_root"),
        )


@dataclass
class RangeConfiguration:
    """One configured range with optional bounds and exclusions."""

    range: str = ""
    range_start: Optional[IPAddress] = None
    range_end: Optional[IPAddress] = None
    omit_ranges: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RangeConfiguration":
        data = _mapping(data, "range configuration")
        return cls(
            range=_str(data, "range"),
            range_start=_strict_ip(data, "range_start"),
            range_end=_strict_ip(data, "range_end"),
            omit_ranges=_str_list(data, "exclude"),
        )


@dataclass
class Address:
    """A static address entry."""

    address_str: str = ""
    gateway: Optional[IPAddress] = None
    address: Optional[Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]] = None
    version: str = ""

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> "Address":
        data = _mapping(data, "address")
        return cls(address_str=_str(data, "address"), gateway=_strict_ip(data, "gateway"))


@dataclass
class IPReservation:
    """An address reserved by this plugin."""

    ip: Optional[IPAddress] = None
    container_id: str = ""
    pod_ref: str = ""
    is_allocated: bool = False

    def __str__(self) -> str:
        ip = "<nil>" if self.ip is None else str(self.ip)
        return f"IP: {ip} is reserved for pod: {self.pod_ref}"


@dataclass
class IPAMConfig:
    """The ipam section of a network configuration."""

    name: str = ""
    type: str = ""
    routes: List[Dict[str, Any]] = field(default_factory=list)
    addresses: List[Address] = field(default_factory=list)
    ip_ranges: List[RangeConfiguration] = field(default_factory=list)
    omit_ranges: List[str] = field(default_factory=list)
    dns: Dict[str, Any] = field(default_factory=dict)
    range: str = ""
    range_start: Optional[IPAddress] = None
    range_end: Optional[IPAddress] = None
    gateway_str: str = ""
    leader_lease_duration: int = 0
    leader_renew_deadline: int = 0
    leader_retry_period: int = 0
    log_file: str = ""
    log_level: str = ""
    reconciler_cron_expression: str = ""
    overlapping_ranges: bool = DEFAULT_OVERLAPPING_IPS_FEATURES
    sleep_for_race: int = DEFAULT_SLEEP_FOR_RACE
    gateway: Optional[IPAddress] = None
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    configuration_path: str = ""
    pod_name: str = ""
    pod_namespace: str = ""
    pod_uid: str = ""
    network_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IPAMConfig":
        """Build from decoded JSON; unparsable addresses are left unset."""
        data = _mapping(data, "ipam configuration")
        dns = _field(data, "dns")
        if dns is _MISSING or dns is None:
            dns = {}
        dns = dict(_mapping(dns, "dns"))
        kubernetes = _field(data, "kubernetes")
        if kubernetes is _MISSING or kubernetes is None:
            kube_config = KubernetesConfig()
        else:
            kube_config = KubernetesConfig.from_dict(kubernetes)
        gateway = data.get("Gateway")
        if gateway is not None and not isinstance(gateway, str):
            raise ValueError(f"field 'Gateway' must be a string, got {gateway!r}")
        return cls(
            name=_str(data, "name"),
            type=_str(data, "type"),
            routes=[dict(route) for route in _object_list(data, "routes")],
            addresses=[Address._from_dict(a) for a in _object_list(data, "addresses")],
            ip_ranges=[RangeConfiguration.from_dict(r) for r in _object_list(data, "ipRanges")],
            omit_ranges=_str_list(data, "exclude"),
            dns=dns,
            range=_str(data, "range"),
            range_start=_backwards_compatible_ip(_str(data, "range_start")),
            range_end=_backwards_compatible_ip(_str(data, "range_end")),
            gateway_str=_str(data, "gateway"),
            leader_lease_duration=_int(data, "leader_lease_duration"),
            leader_renew_deadline=_int(data, "leader_renew_deadline"),
            leader_retry_period=_int(data, "leader_retry_period"),
            log_file=_str(data, "log_file"),
            log_level=_str(data, "log_level"),
            reconciler_cron_expression=_str(data, "reconciler_cron_expression"),
            overlapping_ranges=_bool(
                data, "enable_overlapping_ranges", DEFAULT_OVERLAPPING_IPS_FEATURES
            ),
            sleep_for_race=_int(data, "sleep_for_race", DEFAULT_SLEEP_FOR_RACE),
            gateway=_backwards_compatible_ip(gateway),
            kubernetes=kube_config,
            configuration_path=_str(data, "configuration_path"),
            pod_name=_str(data, "PodName"),
            pod_namespace=_str(data, "PodNamespace"),
            pod_uid=_str(data, "PodUID"),
            network_name=_str(data, "network_name"),
        )

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "IPAMConfig":
        return cls.from_dict(json.loads(text))

    def pod_ref(self) -> str:
        """The namespace/name:uid reference of the pod this config is for."""
        return f"{self.pod_namespace}/{self.pod_name}:{self.pod_uid}"


@dataclass
class Net:
    """A top-level network configuration carrying an ipam section."""

    name: str = ""
    cni_version: str = ""
    ipam: Optional[IPAMConfig] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Net":
        data = _mapping(data, "network configuration")
        ipam = _field(data, "ipam")
        return cls(
            name=_str(data, "name"),
            cni_version=_str(data, "cniVersion"),
            ipam=None if ipam is _MISSING or ipam is None else IPAMConfig.from_dict(ipam),
        )


@dataclass
class NetConfList:
    """An ordered list of network configurations."""

    cni_version: str = ""
    name: str = ""
    disable_check: bool = False
    plugins: List[Net] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NetConfList":
        data = _mapping(data, "network configuration list")
        return cls(
            cni_version=_str(data, "cniVersion"),
            name=_str(data, "name"),
            disable_check=_bool(data, "disableCheck"),
            plugins=[Net.from_dict(p) for p in _object_list(data, "plugins")],
        )