"""
Tests for metadata providers.
"""
from unittest.mock import Mock

import pytest

from recordgrid.core.metadata import (
    CachedMetadataProvider, FieldKind, FieldMetadata, StaticMetadataProvider,
)
from recordgrid.core.records import AliasedValue


METADATA_YAML = """
types:
  contact:
    display_name: Contact
    primary_id: contactid
    primary_name: fullname
    fields:
      contactid:
        kind: uniqueidentifier
        display_name: Contact
      fullname:
        display_name: Full Name
      statuscode:
        kind: choice
        display_name: Status
        options:
          1: Active
          2: Inactive
      custom:
        kind: something-else
"""


class TestStaticMetadataProvider:
    """Test in-memory metadata."""

    @pytest.fixture
    def provider(self, tmp_path):
        path = tmp_path / "metadata.yaml"
        path.write_text(METADATA_YAML, encoding="utf-8")
        return StaticMetadataProvider.from_yaml(path)

    def test_type_meta(self, provider):
        type_meta = provider.get_type_meta("contact")
        assert type_meta.display_name == "Contact"
        assert type_meta.primary_id_attribute == "contactid"
        assert type_meta.primary_name_attribute == "fullname"
        assert provider.get_type_meta("account") is None

    def test_field_meta(self, provider):
        status = provider.get_field_meta("contact", "statuscode")
        assert status.kind is FieldKind.CHOICE
        assert status.option_label(2) == "Inactive"
        assert status.option_label(3) is None
        assert provider.get_field_meta("contact", "fullname").kind is FieldKind.STRING
        assert provider.get_field_meta("contact", "missing") is None

    def test_primary_id_from_type(self, provider):
        assert provider.get_field_meta("contact", "contactid").is_primary_id
        assert not provider.get_field_meta("contact", "fullname").is_primary_id

    def test_unknown_kind(self, provider):
        assert provider.get_field_meta("contact", "custom").kind is FieldKind.OTHER

    def test_aliased_sample_uses_origin(self, provider):
        """Aliased samples are looked up on their origin type and attribute."""
        sample = AliasedValue("contact", "fullname", "Ann")
        meta = provider.get_field_meta("account", "c.fullname", sample)
        assert meta.display_name == "Full Name"

    def test_empty_document(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        provider = StaticMetadataProvider.from_yaml(path)
        assert provider.get_type_meta("contact") is None


class TestCachedMetadataProvider:
    """Test cached lookups."""

    @pytest.fixture
    def inner(self):
        mock = Mock()
        mock.get_field_meta.return_value = FieldMetadata("email", "contact", "Email")
        mock.get_type_meta.return_value = None
        return mock

    @pytest.fixture
    def cached(self, inner):
        return CachedMetadataProvider(inner, ttl=60, maxsize=10)

    def test_caches_field_lookups(self, cached, inner):
        first = cached.get_field_meta("contact", "email")
        second = cached.get_field_meta("contact", "email", "sample")
        assert first is second
        assert inner.get_field_meta.call_count == 1

    def test_caches_missing_types(self, cached, inner):
        """A None answer is cached too."""
        assert cached.get_type_meta("account") is None
        assert cached.get_type_meta("account") is None
        assert inner.get_type_meta.call_count == 1

    def test_aliases_share_entries(self, cached, inner):
        cached.get_field_meta("contact", "a.email", AliasedValue("contact", "email", "x"))
        cached.get_field_meta("contact", "b.email", AliasedValue("contact", "email", "y"))
        assert inner.get_field_meta.call_count == 1

    def test_invalidate(self, cached, inner):
        cached.get_field_meta("contact", "email")
        cached.invalidate()
        cached.get_field_meta("contact", "email")
        assert inner.get_field_meta.call_count == 2
