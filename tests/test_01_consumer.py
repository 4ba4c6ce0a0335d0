from ltiprovider.consumer import Capability
from ltiprovider.consumer import Consumer
from ltiprovider.consumer import Provider
from ltiprovider.consumer import SecurityProfile
from ltiprovider.consumer import Service
from ltiprovider.defaults import DEFAULT_PROVIDER_PROFILE


def make_consumer():
    return Consumer(
        vendor_code="moodle.org", vendor_name="Moodle Pty Ltd", code="moodle",
        name="Moodle", version="2.2", guid="tc-1",
        services=[Service(url="https://lms.example.org/reg", name="RegistrationService"),
                  Service(url="https://lms.example.org/out", name="OutcomesService")],
        capabilities=[Capability("basic-lti-launch-request"), Capability("Outcomes.LTI1")],
        security_profiles=[SecurityProfile("basic_hash_message_security_profile",
                                           {"algorithm": "SHA-1"})])


def test_lookup():
    consumer = make_consumer()
    assert consumer.get_service("RegistrationService").url == "https://lms.example.org/reg"
    assert consumer.get_service("NoSuchService") is None
    _sp = consumer.get_security_profile("basic_hash_message_security_profile")
    assert _sp.get_config_item("algorithm") == "SHA-1"
    assert _sp.get_config_item("key_length") is None
    assert consumer.get_security_profile("oauth_hmac_message_security_profile") is None


def test_has_capabilities():
    consumer = make_consumer()
    assert consumer.has_capabilities(["basic-lti-launch-request", "Outcomes.LTI1"])
    assert consumer.has_capabilities(["Outcomes.LTI1", "basic-lti-launch-request"])
    assert consumer.has_capabilities([])
    assert not consumer.has_capabilities(["basic-lti-launch-request", "Result.autocreate"])


def test_duplicates_last_one_wins():
    consumer = Consumer(services=[Service(url="https://a.example.org", name="S"),
                                  Service(url="https://b.example.org", name="S")])
    assert len(consumer.services) == 1
    assert consumer.get_service("S").url == "https://b.example.org"


def test_mappings_are_copies():
    consumer = make_consumer()
    _services = consumer.services
    del _services["RegistrationService"]
    assert consumer.get_service("RegistrationService")


def test_to_dict():
    _info = make_consumer().to_dict()
    assert _info["guid"] == "tc-1"
    assert set(_info["services"].keys()) == {"RegistrationService", "OutcomesService"}
    assert _info["capabilities"] == ["basic-lti-launch-request", "Outcomes.LTI1"]
    assert _info["security_profiles"]["basic_hash_message_security_profile"] == {
        "name": "basic_hash_message_security_profile", "config": {"algorithm": "SHA-1"}}


def test_capability_str():
    assert str(Capability("Outcomes.LTI1")) == "Outcomes.LTI1"


def test_provider():
    provider = Provider()
    assert provider.profile_xml == DEFAULT_PROVIDER_PROFILE
    provider.profile_xml = "<tool_registration_request/>"
    assert provider.profile_xml == "<tool_registration_request/>"
