# whereabouts

Building blocks for IP address management: address arithmetic over whole
ranges, parsing of IPAM configuration, a small levelled logger, build version
strings, and the naming and offset encoding used for pools and reservations
kept as cluster resources.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `whereabouts.iphelpers`: `compare_ips`, `is_ip_in_range`, `inc_ip`,
  `dec_ip`, `network_ip`, `subnet_broadcast_ip`, `has_usable_ips`,
  `first_usable_ip`, `last_usable_ip`, `ip_get_offset`, `ip_add_offset`,
  `is_ipv4` and `get_ip_range`. Addresses may be given as `ipaddress`
  objects or strings; IPv4-mapped IPv6 addresses are treated as IPv4.
  Subnets too small to have usable addresses (IPv4 /31 and /32, IPv6 /127
  and /128) raise `ValueError`.
- `whereabouts.logger`: `Logger` writes timestamped lines at a `Level`
  (`PANIC`, `ERROR`, `VERBOSE`, `DEBUG`) to stderr and, after `set_file`, to
  a file opened for appending. `set_level` takes a level name in any case;
  unknown names leave the level unchanged. `Logger.error` returns a
  `RuntimeError` carrying the message, for the caller to raise.
- `whereabouts.types`: `IPAMConfig.from_json` / `IPAMConfig.from_dict`,
  `RangeConfiguration`, `Address`, `IPReservation`, `Net`, `NetConfList`,
  the `Operation` enum and `sanitize_ip`, which accepts IPv4 octets with
  leading zeros. Unparsable top-level `range_start`, `range_end` and
  `Gateway` values are left unset; overlapping ranges default to enabled.
- `whereabouts.version`: `BuildInfo` with `full_version`,
  `full_version_with_runtime_info` and `semantic_version`.
- `whereabouts.naming`: `PoolIdentifier`, `IPAllocation`, `ip_pool_name`,
  `normalize_range`, `normalize_ip`, `to_allocation_map`,
  `to_ip_reservation_list` and `namespace_from_context`.

## Example

```python
import ipaddress

from whereabouts.iphelpers import get_ip_range, ip_add_offset
from whereabouts.naming import PoolIdentifier, ip_pool_name, normalize_ip

network = ipaddress.ip_network("192.168.2.0/24")
first, last = get_ip_range(network, ipaddress.ip_address("192.168.2.50"), None)
print(first, last)            # 192.168.2.50 192.168.2.254

print(ip_add_offset(ipaddress.ip_address("192.168.1.1"), 256))  # 192.168.2.1

print(ip_pool_name(PoolIdentifier("10.0.0.0/16", "net1")))      # net1-10.0.0.0-16
print(normalize_ip(ipaddress.ip_address("2001:db8::"), "net1"))  # net1-2001-db8--0
```

Parsing an IPAM configuration:

```python
from whereabouts.types import IPAMConfig

config = IPAMConfig.from_json('{"type": "whereabouts", "range": "10.0.0.0/24"}')
print(config.range, config.overlapping_ranges)   # 10.0.0.0/24 True
```

Version strings:

```python
from whereabouts.version import BuildInfo

info = BuildInfo(version="v1.2.3", git_sha="abc123")
print(info.full_version())        # v1.2.3-abc123
print(info.semantic_version())    # 1.2.3
```

## What this package does not do

It does not talk to a cluster. There is no client for pool or reservation
resources, no store that allocates or releases addresses, no leader
election, no reconciler that finds and frees addresses held by pods that are
gone, and no command-line program. The package supplies the address
arithmetic, configuration parsing and resource naming such tools are built
on.