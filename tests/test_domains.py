"""Tests for domain validation, naming helpers, and pricing."""

from __future__ import annotations

import pytest

from sitesmith.domains import (
    hosting_unit_name,
    is_valid_domain,
    require_valid_domain,
    require_valid_years,
    slugify,
    split_domain,
    with_random_suffix,
)
from sitesmith.errors import ValidationError
from sitesmith.models.session import DeploymentType
from sitesmith.pricing import MINIMUM_CHARGE_PENCE, checkout_amount_pence, domain_price_pence


class TestIsValidDomain:
    @pytest.mark.parametrize(
        "domain",
        [
            "example.com",
            "mybakery.co.uk",
            "example-test-123.com",
            "a.io",
            f"{'a' * 63}.com",
        ],
    )
    def test_valid(self, domain: str):
        assert is_valid_domain(domain) is True

    @pytest.mark.parametrize(
        "domain",
        [
            "my bakery.com",
            " example.com",
            ".example.com",
            "example.com.",
            "my--bakery.com",
            "-bakery.com",
            "bakery-.com",
            "localhost",
            "example.c",
            "example.123",
            "exa..mple.com",
            f"{'a' * 64}.com",
            "",
        ],
    )
    def test_invalid(self, domain: str):
        assert is_valid_domain(domain) is False

    def test_total_length_limit(self):
        label = "a" * 60
        long_domain = ".".join([label] * 5) + ".com"
        assert len(long_domain) > 253
        assert is_valid_domain(long_domain) is False

    def test_require_valid_domain_normalizes_case(self):
        assert require_valid_domain("MyBakery.CO.UK") == "mybakery.co.uk"

    def test_require_valid_domain_rejects(self):
        with pytest.raises(ValidationError, match="Invalid domain"):
            require_valid_domain("bad domain.com")


class TestYears:
    @pytest.mark.parametrize("years", [1, 2, 5, "3"])
    def test_accepts_one_to_five(self, years):
        assert 1 <= require_valid_years(years) <= 5

    @pytest.mark.parametrize("years", [0, 6, -1, "two"])
    def test_rejects_out_of_range(self, years):
        with pytest.raises(ValidationError):
            require_valid_years(years)


class TestNaming:
    def test_split_multi_label_suffix(self):
        assert split_domain("mybakery.co.uk") == ("mybakery", "co.uk")
        assert split_domain("shop.example.com") == ("example", "com")

    def test_slugify(self):
        assert slugify("Leeds  Bakery & Café!") == "leeds-bakery-caf"

    def test_hosting_unit_name_prefers_domain(self):
        assert hosting_unit_name("mybakery.co.uk", "Leeds Bakery") == "mybakery-co-uk"

    def test_hosting_unit_name_falls_back(self):
        assert hosting_unit_name("", "Leeds Bakery") == "leeds-bakery"
        assert hosting_unit_name("", "") == "site"

    def test_hosting_unit_name_length(self):
        assert len(hosting_unit_name("", "x" * 100, max_length=40)) <= 40

    def test_random_suffix(self):
        name = with_random_suffix("mybakery-co-uk")
        assert name.startswith("mybakery-co-uk-")
        assert len(name) == len("mybakery-co-uk") + 5

    def test_random_suffix_respects_limit(self):
        assert len(with_random_suffix("a" * 64, max_length=64)) <= 64


class TestPricing:
    def test_known_tld(self):
        assert domain_price_pence("mybakery.co.uk", 2) == 1400

    def test_unknown_tld_uses_default(self):
        assert domain_price_pence("bakery.bakery", 1) == 1599

    def test_full_hosting_includes_domain(self):
        assert checkout_amount_pence(DeploymentType.FULL_HOSTING, "example.com", 3) == 2400

    def test_minimum_charge(self):
        assert checkout_amount_pence(DeploymentType.ZIP_DOWNLOAD) == MINIMUM_CHARGE_PENCE
