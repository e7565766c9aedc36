"""Unit tests for the checkout field normalization service."""

import logging

import pytest

from checkout_normalizer.config.config_loader import load_runtime_config
from checkout_normalizer.config.settings import FieldClassification, RuntimeConfig, SectionFields
from checkout_normalizer.services.field_normalizer import FieldNormalizer


def test_classify(field_normalizer):
    assert field_normalizer.classify("billing_city") == "uppercase"
    assert field_normalizer.classify("billing_email") == "lowercase"
    assert field_normalizer.classify("shipping_phone") == "phone"
    assert field_normalizer.classify("payment_method") is None


def test_classify_follows_configured_sections():
    """Test classification and section gating come from the field configuration."""
    config = RuntimeConfig(
        fields=FieldClassification(
            billing=SectionFields(uppercase=["billing_city"]),
            shipping=SectionFields(uppercase=["shipping_city"], phone=["shipping_phone"]),
        )
    )
    normalizer = FieldNormalizer(config)

    assert normalizer.classify("shipping_phone") == config.fields.category_of("shipping_phone") == "phone"
    assert normalizer.classify("billing_email") is None

    posted = {"billing_city": "αθήνα", "shipping_city": "πάτρα", "billing_email": "A@B.GR"}
    result = normalizer.normalize_posted_data(posted, require_ship_flag=True)
    assert result == {"billing_city": "ΑΘΗΝΑ", "shipping_city": "πάτρα", "billing_email": "A@B.GR"}
    assert normalizer.normalize_address("shipping", {"city": "πάτρα"}) == {"city": "ΠΑΤΡΑ"}


def test_normalize_value(field_normalizer):
    """Test each category routes to its transform."""
    assert field_normalizer.normalize_value("billing_first_name", "  <b>Γιώργος</b> ") == "ΓΙΩΡΓΟΣ"
    assert field_normalizer.normalize_value("billing_email", "  Giorgos@Example.GR ") == "giorgos@example.gr"
    assert field_normalizer.normalize_value("billing_phone", "+30 694 123 4567") == "694 123 4567"
    assert field_normalizer.normalize_value("payment_method", "cod") == "cod"


def test_normalize_value_non_text(field_normalizer):
    assert field_normalizer.normalize_value("billing_city", None) == ""
    assert field_normalizer.normalize_value("billing_phone", None) is None


def test_posted_data_without_ship_flag(field_normalizer, posted_checkout):
    """Test shipping fields are untouched unless shipping elsewhere."""
    result = field_normalizer.normalize_posted_data(posted_checkout, require_ship_flag=True)

    assert result["billing_first_name"] == "ΓΙΩΡΓΟΣ"
    assert result["billing_last_name"] == "ΠΑΠΑΔΟΠΟΥΛΟΣ"
    assert result["billing_address_1"] == "ΟΔΟΣ ΕΡΜΟΥ 12"
    assert result["billing_city"] == "ΑΘΗΝΑ"
    assert result["billing_email"] == "giorgos@example.gr"
    assert result["billing_phone"] == "694 123 4567"
    assert result["order_comments"] == "ΠΑΡΑΚΑΛΩ ΚΑΛΕΣΤΕ ΠΡΙΝ"

    assert result["billing_company"] == ""
    assert result["billing_postcode"] == "10563"
    assert result["payment_method"] == "cod"
    assert result["shipping_first_name"] == "μαρία"
    assert result["shipping_city"] == "Θεσσαλονίκη"


@pytest.mark.parametrize("flag", ["1", "on", True])
def test_posted_data_with_ship_flag(field_normalizer, posted_checkout, flag):
    posted_checkout["ship_to_different_address"] = flag
    result = field_normalizer.normalize_posted_data(posted_checkout, require_ship_flag=True)

    assert result["shipping_first_name"] == "ΜΑΡΙΑ"
    assert result["shipping_city"] == "ΘΕΣΣΑΛΟΝΙΚΗ"
    assert result["shipping_phone"] == "231 012 3456"


@pytest.mark.parametrize("flag", ["0", "", False, None])
def test_posted_data_unchecked_ship_flag(field_normalizer, posted_checkout, flag):
    posted_checkout["ship_to_different_address"] = flag
    result = field_normalizer.normalize_posted_data(posted_checkout, require_ship_flag=True)
    assert result["shipping_city"] == "Θεσσαλονίκη"


def test_posted_data_does_not_mutate_input(field_normalizer, posted_checkout):
    original = dict(posted_checkout)
    field_normalizer.normalize_posted_data(posted_checkout)
    assert posted_checkout == original


def test_normalize_order(field_normalizer, posted_checkout, caplog):
    """Test the order pass covers shipping fields and logs its stage."""
    with caplog.at_level(logging.INFO):
        result = field_normalizer.normalize_order(posted_checkout, request_id="req-1")

    assert result["shipping_first_name"] == "ΜΑΡΙΑ"
    assert result["billing_city"] == "ΑΘΗΝΑ"
    assert "Normalization order completed" in caplog.text


def test_normalization_is_idempotent(field_normalizer, posted_checkout):
    once = field_normalizer.normalize_order(posted_checkout)
    assert field_normalizer.normalize_order(once) == once


def test_normalize_address(field_normalizer):
    """Test block-checkout keys map onto prefixed field names."""
    address = {
        "first_name": "μαρία",
        "city": "Ηράκλειο",
        "email": "Maria@Example.GR",
        "phone": "+306971234567",
        "postcode": "71202",
    }
    billing = field_normalizer.normalize_address("billing", address)
    assert billing == {
        "first_name": "ΜΑΡΙΑ",
        "city": "ΗΡΑΚΛΕΙΟ",
        "email": "maria@example.gr",
        "phone": "697 123 4567",
        "postcode": "71202",
    }

    shipping = field_normalizer.normalize_address("shipping", address)
    assert shipping["city"] == "ΗΡΑΚΛΕΙΟ"
    assert shipping["email"] == "Maria@Example.GR"


def test_normalize_address_unknown_section(field_normalizer):
    with pytest.raises(ValueError):
        field_normalizer.normalize_address("payment", {"first_name": "x"})


def test_uppercase_labels(field_normalizer):
    assert field_normalizer.uppercase_labels({"GR": "Ελλάδα", "CY": "Κύπρος", "DE": "Germany"}) == {
        "GR": "ΕΛΛΑΔΑ",
        "CY": "ΚΥΠΡΟΣ",
        "DE": "GERMANY",
    }


def test_uppercase_states(field_normalizer):
    states = {"GR": {"I": "Αττική", "B": "Κεντρική Μακεδονία"}, "DE": []}
    assert field_normalizer.uppercase_states(states) == {
        "GR": {"I": "ΑΤΤΙΚΗ", "B": "ΚΕΝΤΡΙΚΗ ΜΑΚΕΔΟΝΙΑ"},
        "DE": [],
    }


def test_normalize_text(field_normalizer):
    assert field_normalizer.normalize_text("uppercase", "Αθήνα") == "ΑΘΗΝΑ"
    assert field_normalizer.normalize_text("uppercase", "Αθήνα", remove_greek_accents=False) == "ΑΘ\u0389ΝΑ"
    assert field_normalizer.normalize_text("lowercase", " A@B.GR ") == "a@b.gr"
    assert field_normalizer.normalize_text("phone", "0030 6941234567") == "694 123 4567"
    with pytest.raises(ValueError):
        field_normalizer.normalize_text("titlecase", "x")


def test_client_settings(field_normalizer):
    """Test the browser payload mirrors the server configuration."""
    settings = field_normalizer.client_settings()
    assert settings["removeGreekAccents"] is True
    assert settings["greekMap"]["ς"] == "Σ"
    assert "billing_city" in settings["fields"]["uppercase"]
    assert settings["fields"]["lowercase"] == ["billing_email"]
    assert settings["phone"]["countryPrefixes"] == ["+30", "0030"]
    assert settings["phone"]["groupSizes"] == [3, 3, 4]
    assert len(settings["configVersion"]) == 16


def test_config_flags_respected(config_path):
    """Test accent and phone switches from configuration."""
    config = load_runtime_config(
        config_path,
        overrides={
            "case": {"remove_greek_accents": False, "uppercase_strategy": "table"},
            "phone": {"enabled": False},
        },
    )
    normalizer = FieldNormalizer(config)
    assert normalizer.case_converter.strategy.name == "table"
    assert normalizer.normalize_value("billing_city", "Αθήνα") == "ΑΘ\u0389ΝΑ"
    assert normalizer.normalize_value("billing_phone", "+30 694 123 4567") == "+30 694 123 4567"
