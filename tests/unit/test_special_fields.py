"""Unit tests for the special-field recognizer."""

import pytest

from formflow.strategies.field_resolution.models import FieldCatalog, FieldDescriptor
from formflow.strategies.field_resolution.payload import normalize_payload
from formflow.strategies.field_resolution.special_fields import (
    SemanticRole,
    SpecialFieldRecognizer,
    find_email_in_payload,
    find_role_value,
    roles_by_label,
    roles_by_type,
)


def field(**kwargs) -> FieldDescriptor:
    return FieldDescriptor.model_validate(kwargs)


# =============================================================================
# Classification Tests
# =============================================================================


class TestRolesByType:
    """Test suite for type-driven classification."""

    @pytest.mark.parametrize(
        "descriptor, expected",
        [
            ({"id": "x", "type": "email"}, [SemanticRole.EMAIL]),
            ({"id": "x", "type": "tel"}, [SemanticRole.PHONE]),
            ({"id": "x", "type": "phone"}, [SemanticRole.PHONE]),
            ({"id": "x", "type": "name"}, [SemanticRole.NAME]),
            ({"id": "customer_firstname", "type": "text"}, [SemanticRole.FIRST_NAME]),
            ({"id": "LastName_2", "type": "text"}, [SemanticRole.LAST_NAME]),
            ({"id": "full_name", "type": "text"}, [SemanticRole.NAME]),
            ({"id": "company_field", "type": "text"}, [SemanticRole.COMPANY]),
            ({"id": "first_contact_name", "type": "text"}, []),
            ({"id": "last_known_name", "type": "text"}, []),
            ({"id": "notes", "type": "text"}, []),
            ({"id": "x", "type": "select"}, []),
            ({"id": "x"}, []),
        ],
    )
    def test_classification(self, descriptor, expected):
        assert roles_by_type(field(**descriptor)) == expected

    def test_first_name_not_misclassified_as_generic_name(self):
        """First/last markers are checked before the generic 'name' substring."""
        assert SemanticRole.NAME not in roles_by_type(field(id="first_name", type="text"))


class TestRolesByLabel:
    """Test suite for label-driven classification."""

    def test_email_address_is_not_postal_address(self):
        assert roles_by_label(field(id="x", label="Email Address")) == [SemanticRole.EMAIL]

    def test_first_name_label(self):
        roles = roles_by_label(field(id="x", label="First Name"))

        assert roles == [SemanticRole.FIRST_NAME]

    def test_generic_name_label(self):
        assert roles_by_label(field(id="x", label="Your Name")) == [SemanticRole.NAME]

    def test_label_can_imply_several_roles(self):
        roles = roles_by_label(field(id="x", label="City / State / Postal code"))

        assert roles == [SemanticRole.CITY, SemanticRole.STATE, SemanticRole.ZIP]

    @pytest.mark.parametrize(
        "label, role",
        [
            ("Telephone", SemanticRole.PHONE),
            ("Organization", SemanticRole.COMPANY),
            ("Street Address", SemanticRole.ADDRESS),
            ("Province", SemanticRole.STATE),
            ("Country of residence", SemanticRole.COUNTRY),
        ],
    )
    def test_single_roles(self, label, role):
        assert role in roles_by_label(field(id="x", label=label))

    def test_no_label(self):
        assert roles_by_label(field(id="x")) == []


class TestSemanticRole:
    def test_from_variable_ignores_case(self):
        assert SemanticRole.from_variable("EMAIL") is SemanticRole.EMAIL
        assert SemanticRole.from_variable("firstname") is SemanticRole.FIRST_NAME
        assert SemanticRole.from_variable("favoriteColor") is None


# =============================================================================
# Recognizer Tests
# =============================================================================


class TestSpecialFieldRecognizer:
    """Test suite for SpecialFieldRecognizer."""

    @pytest.fixture
    def recognizer(self, events):
        return SpecialFieldRecognizer(events)

    def test_type_pass_overwrites_label_pass(self, recognizer):
        """A label suggesting 'name' does not win over a declared email type."""
        mapped = recognizer.recognize(field(id="f1", type="email", label="Name or Email"), "a@b.com")

        assert mapped["email"] == "a@b.com"
        assert mapped["name"] == "a@b.com"

    def test_emits_alias_events(self, recognizer, events):
        recognizer.recognize(field(id="f4", type="tel", label="Phone"), "555")

        sources = [e["source"] for e in events.of("mapping.alias_added")]
        assert sources == ["label", "type"]

    def test_item_array_mapping(self, recognizer):
        catalog = FieldCatalog(
            form_id="form1",
            fields=(
                field(id="a", type="email"),
                field(id="b", label="Mobile phone"),
                field(id="c", type="name", label="First"),
                field(id="d", type="select"),
            ),
        )
        items = [
            {"id": "a", "value": "a@b.com"},
            {"id": "b", "value": "555"},
            {"id": "c", "value": "Ada"},
            {"id": "d", "value": "opt"},
            {"id": "zz", "value": "unknown field"},
            "junk",
        ]
        mapped: dict = {}

        recognizer.map_item_array(items, catalog, mapped)

        assert mapped == {"email": "a@b.com", "phone": "555", "name": "Ada"}


# =============================================================================
# Role Lookup Tests
# =============================================================================


class TestFindRoleValue:
    """Test suite for find_role_value tier ordering."""

    def test_type_beats_label(self):
        catalog = FieldCatalog(
            form_id="form1",
            fields=(
                field(id="lbl", label="Email me at"),
                field(id="typ", type="email"),
            ),
        )
        payload = normalize_payload({"lbl": "label@x.com", "typ": "type@x.com"})

        assert find_role_value(SemanticRole.EMAIL, catalog, payload) == ("type@x.com", "type")

    def test_label_used_when_no_type_match(self):
        catalog = FieldCatalog(form_id="form1", fields=(field(id="q7", label="Company name"),))
        payload = normalize_payload({"q7": "Acme"})

        assert find_role_value(SemanticRole.COMPANY, catalog, payload) == ("Acme", "label")

    def test_typed_field_without_value_is_skipped(self):
        catalog = FieldCatalog(
            form_id="form1",
            fields=(field(id="typ", type="email"), field(id="lbl", label="Email")),
        )
        payload = normalize_payload({"lbl": "l@x.com"})

        assert find_role_value(SemanticRole.EMAIL, catalog, payload) == ("l@x.com", "label")

    def test_email_field_id_tier(self):
        catalog = FieldCatalog(form_id="form1", fields=(field(id="contact_email"),))
        payload = normalize_payload({"contact_email": "c@x.com"})

        assert find_role_value(SemanticRole.EMAIL, catalog, payload) == ("c@x.com", "field_id")

    def test_email_payload_scan_requires_at_sign(self):
        payload = normalize_payload({"work_email": "not an address", "EmailAlt": "z@x.com"})

        assert find_role_value(SemanticRole.EMAIL, FieldCatalog.empty(), payload) == ("z@x.com", "payload_key")
        assert find_email_in_payload(payload) == ("EmailAlt", "z@x.com")

    def test_payload_scan_only_for_email(self):
        payload = normalize_payload({"my_phone": "555"})

        assert find_role_value(SemanticRole.PHONE, FieldCatalog.empty(), payload) is None
