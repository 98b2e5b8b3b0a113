from threat_timeline.services.extraction import parse_destination_host


def test_hostname_with_ip():
    dest = parse_destination_host("SERVER2 (10.0.0.12)")
    assert dest.hostname == "SERVER2"
    assert dest.ip == "10.0.0.12"
    assert dest.value == "SERVER2"
    assert dest.linked_value == "10.0.0.12"


def test_bare_value_is_hostname():
    dest = parse_destination_host("  10.0.0.12 ")
    assert dest.hostname == "10.0.0.12"
    assert dest.ip is None
    assert dest.value == "10.0.0.12"
    assert dest.linked_value is None


def test_ip_only_in_parentheses():
    dest = parse_destination_host("(10.0.0.12)")
    assert dest.hostname is None
    assert dest.value == "10.0.0.12"
    assert dest.linked_value is None


def test_empty_string():
    dest = parse_destination_host("")
    assert dest.value == ""
