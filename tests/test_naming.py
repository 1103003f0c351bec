from ipaddress import IPv4Address, IPv6Address, ip_address

import pytest

from whereabouts.naming import (
    IPAllocation,
    PoolIdentifier,
    ip_pool_name,
    namespace_from_context,
    normalize_ip,
    normalize_range,
    to_allocation_map,
    to_ip_reservation_list,
)
from whereabouts.types import IPReservation


def test_normalize_range_ipv4():
    assert normalize_range("10.10.10.0/16") == "10.10.10.0-16"


def test_normalize_range_has_no_colons_or_slashes():
    result = normalize_range("2001:1b74:480:60b1::10/64")
    assert ":" not in result and "/" not in result
    assert result.replace("-", ":").count(":") == "2001:1b74:480:60b1::10/64".count(":") + 1


def test_normalize_range_trailing_colon_gets_zero():
    assert normalize_range("fd00::") == normalize_range("fd00::0")


def test_normalize_range_empty_raises():
    with pytest.raises(ValueError):
        normalize_range("")


def test_pool_name_unnamed_network_is_normalized_range():
    identifier = PoolIdentifier(ip_range="10.10.10.0/16")
    assert ip_pool_name(identifier) == normalize_range("10.10.10.0/16")


def test_pool_name_named_network_is_prefixed():
    identifier = PoolIdentifier(ip_range="10.10.10.0/24", network_name="network2")
    name = ip_pool_name(identifier)
    assert name.startswith("network2-")
    assert name[len("network2-"):] == normalize_range("10.10.10.0/24")


def test_named_and_unnamed_pool_names_differ_for_same_range():
    unnamed = ip_pool_name(PoolIdentifier("10.10.10.0/16"))
    named = ip_pool_name(PoolIdentifier("10.10.10.0/16", "net1"))
    assert unnamed != named
    assert named.endswith(unnamed)


def test_normalize_ip_ipv4_unchanged():
    assert normalize_ip(IPv4Address("10.10.10.1"), "") == "10.10.10.1"


def test_normalize_ip_accepts_text():
    assert normalize_ip("10.10.10.2", "") == normalize_ip(IPv4Address("10.10.10.2"), "")


def test_normalize_ip_mapped_ipv4_prints_as_ipv4():
    assert normalize_ip("::ffff:10.10.10.3", "") == "10.10.10.3"


def test_normalize_ip_ipv6_denormalizes_back():
    ip = ip_address("2001:1b74:0480:60b1:0000:0000:0000:0002")
    normalized = normalize_ip(ip, "")
    assert ":" not in normalized
    assert ip_address(normalized.replace("-", ":")) == ip


def test_normalize_ip_trailing_colon_gets_zero():
    ip = IPv6Address("2001:db8::")
    assert normalize_ip(ip, "") == normalize_range("2001:db8::0")
    assert ip_address(normalize_ip(ip, "").replace("-", ":")) == ip


def test_normalize_ip_with_network_name():
    ip = IPv4Address("10.10.10.1")
    assert normalize_ip(ip, "dummyNetwork") == "dummyNetwork-" + normalize_ip(ip, "")


def test_normalize_ip_none():
    assert normalize_ip(None, "") == "<nil>"


def test_to_ip_reservation_list_offsets_from_first_ip():
    allocations = {
        "1": IPAllocation(container_id="c1", pod_ref="default/pod1:uid1"),
        "2": IPAllocation(container_id="c2", pod_ref="default/pod2:uid2"),
    }
    reservations = to_ip_reservation_list(allocations, IPv4Address("10.10.10.0"))
    by_pod = {r.pod_ref: r for r in reservations}
    assert by_pod["default/pod1:uid1"].ip == IPv4Address("10.10.10.1")
    assert by_pod["default/pod2:uid2"].ip == IPv4Address("10.10.10.2")
    assert by_pod["default/pod2:uid2"].container_id == "c2"


@pytest.mark.parametrize("offset", ["abc", "", "1.5", " 1", "1_0", "9223372036854775808"])
def test_to_ip_reservation_list_skips_malformed_offsets(offset):
    allocations = {
        offset: IPAllocation(pod_ref="default/bad:uid"),
        "1": IPAllocation(pod_ref="default/good:uid"),
    }
    reservations = to_ip_reservation_list(allocations, "10.10.10.0")
    assert [r.pod_ref for r in reservations] == ["default/good:uid"]


def test_to_ip_reservation_list_negative_ipv4_offset_has_no_ip():
    reservations = to_ip_reservation_list({"-1": IPAllocation(pod_ref="p")}, "10.10.10.0")
    assert len(reservations) == 1
    assert reservations[0].ip is None


def test_to_ip_reservation_list_empty():
    assert to_ip_reservation_list({}, "10.10.10.0") == []


def test_to_allocation_map_remaining_live_pod():
    reservations = [IPReservation(ip=IPv4Address("10.10.10.2"), pod_ref="default/pod2:uid2")]
    allocations = to_allocation_map(reservations, IPv4Address("10.10.10.0"))
    assert allocations == {"2": IPAllocation(pod_ref="default/pod2:uid2")}


def test_allocation_map_round_trip_ipv4():
    allocations = {
        "1": IPAllocation(container_id="a", pod_ref="default/pod1:u1"),
        "256": IPAllocation(container_id="b", pod_ref="default/pod2:u2"),
    }
    first = IPv4Address("192.168.1.0")
    assert to_allocation_map(to_ip_reservation_list(allocations, first), first) == allocations


def test_allocation_map_round_trip_ipv6():
    allocations = {
        "0": IPAllocation(container_id="x", pod_ref="ns/a:1"),
        "65535": IPAllocation(container_id="y", pod_ref="ns/b:2"),
    }
    first = IPv6Address("2001:1b74:480:60b1::10")
    assert to_allocation_map(to_ip_reservation_list(allocations, first), first) == allocations


def test_to_allocation_map_mixed_family_raises():
    reservations = [IPReservation(ip=IPv6Address("ff02::1"), pod_ref="p")]
    with pytest.raises(ValueError, match="cannot calculate offset between IPv6"):
        to_allocation_map(reservations, IPv4Address("192.168.3.0"))


def test_to_allocation_map_missing_ip_raises():
    with pytest.raises(ValueError):
        to_allocation_map([IPReservation(pod_ref="p")], IPv4Address("10.0.0.0"))


def test_namespace_from_context_default():
    assert namespace_from_context("") == "kube-system"


def test_namespace_from_context_keeps_given():
    assert namespace_from_context("default") == "default"