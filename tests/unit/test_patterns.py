"""Tests for the pattern library."""
import pytest

from callsheet.extraction.fast.patterns import (
    PatternLibrary,
    format_phone,
    get_pattern_library,
    normalize_name,
    phone_digits,
)
from callsheet.extraction.types import FieldType


@pytest.fixture
def lib():
    return get_pattern_library()


class TestNormalizeName:
    def test_all_caps_is_title_cased(self):
        assert normalize_name("JOHN SMITH") == "John Smith"

    def test_mixed_case_is_left_alone(self):
        assert normalize_name("Ronan McDonald") == "Ronan McDonald"

    def test_whitespace_is_collapsed(self):
        assert normalize_name("  Sarah    Johnson  ") == "Sarah Johnson"

    def test_trailing_delimiters_are_stripped(self):
        assert normalize_name("Coni Tarallo /") == "Coni Tarallo"

    @pytest.mark.parametrize("name", [
        "JOHN SMITH", "o'BRIEN", "MARY-KATE O'NEIL", "  Sarah  Johnson ", "José ÁLVAREZ", "",
    ])
    def test_idempotent(self, name):
        once = normalize_name(name)
        assert normalize_name(once) == once


class TestPhoneFormatting:
    @pytest.mark.parametrize("raw", [
        "929.250.6798", "929-250-6798", "(929) 250-6798", "9292506798", "+1 929 250 6798",
    ])
    def test_nanp_formats(self, raw):
        assert format_phone(raw) == "(929) 250-6798"

    def test_non_nanp_is_trimmed(self):
        assert format_phone("  +44 20  7946 0958 ") == "+44 20 7946 0958"

    def test_phone_digits_drops_country_code(self):
        assert phone_digits("+1 (555) 123-4567") == "5551234567"


class TestEmail:
    def test_standard_email_is_lower_cased(self, lib):
        assert lib.extract_email("Write to Jane.Doe@Studio.com today") == "jane.doe@studio.com"

    def test_obfuscated_email(self, lib):
        assert lib.extract_email("jane [at] studio [dot] com") == "jane@studio.com"

    def test_no_email(self, lib):
        assert lib.extract_email("no contact here") is None

    def test_find_emails_reports_positions(self, lib):
        text = "a@x.com and b@y.org"
        found = lib.find_emails(text)
        assert [m.value for m in found] == ["a@x.com", "b@y.org"]
        assert found[0].field_type is FieldType.EMAIL
        assert found[1].start == text.index("b@y.org")


class TestPhone:
    def test_dotted_nanp(self, lib):
        assert lib.extract_phone("Cell 929.250.6798") == "(929) 250-6798"

    def test_extension_wins_over_plain(self, lib):
        assert lib.extract_phone("(212) 555-0100 x204") == "(212) 555-0100 x204"

    def test_international(self, lib):
        assert lib.extract_phone("London +44 20 7946 0958") == "+44 20 7946 0958"

    def test_digits_inside_longer_number_are_ignored(self, lib):
        assert lib.extract_phone("Order 123456789012345") is None


class TestNames:
    def test_extract_name_after_role_label(self, lib):
        assert lib.extract_name("Photographer: Coni Tarallo / 929.250.6798") == "Coni Tarallo"

    def test_extract_all_caps_name(self, lib):
        assert lib.extract_name("JOHN SMITH  john@studio.com") == "John Smith"

    def test_role_words_are_trimmed(self, lib):
        assert lib.trim_name("Director John Smith") == "John Smith"

    def test_find_names_last_first(self, lib):
        names = [m.value for m in lib.find_names("Smith, John - Producer")]
        assert "John Smith" in names

    @pytest.mark.parametrize("text", ["TBD", "Call Time", "Director", "john@x.com", "555 123 4567", "x"])
    def test_not_a_name(self, lib, text):
        assert not lib.looks_like_name(text)

    def test_plain_name(self, lib):
        assert lib.looks_like_name("Coni Tarallo")


class TestRoles:
    def test_canonical_role_abbreviation(self, lib):
        assert lib.canonical_role("DP") == "Director of Photography"

    def test_longest_keyword_wins(self, lib):
        assert lib.canonical_role("Executive Producer") == "Executive Producer"

    def test_role_label(self, lib):
        assert lib.is_role_label("Photographer")
        assert not lib.is_role_label("Email")
        assert not lib.is_role_label("Coni Tarallo")

    def test_infer_role_from_label_prefix(self, lib):
        assert lib.infer_role("Gaffer: Tom Reyes") == "Gaffer"

    def test_role_only_line(self, lib):
        assert lib.is_role_line("Key Grip")
        assert not lib.is_role_line("Key Grip (310) 555-0142")


class TestLineClassification:
    @pytest.mark.parametrize("line", [
        "Call Time: 7:00 AM", "Location: Stage 4", "7:30 AM", "Monday, June 3", "12/06/2024",
    ])
    def test_skipped(self, lib, line):
        assert lib.should_skip(line)

    def test_bare_phone_is_not_skipped(self, lib):
        assert not lib.should_skip("555-123-4567")

    @pytest.mark.parametrize("line", ["CREW", "== TALENT ==", "Camera Department", "CLIENTS:"])
    def test_section_headers(self, lib, line):
        assert lib.is_section_header(line)

    @pytest.mark.parametrize("line", ["Crew call: 7am", "Camera: Ann Lee / (212) 555-0101", "Production notes for the whole week ahead"])
    def test_not_section_headers(self, lib, line):
        assert not lib.is_section_header(line)

    def test_header_row(self, lib):
        assert lib.is_header_row(["Name", "Role", "Email", "Phone"])
        assert not lib.is_header_row(["Alice Walker", "Director", "alice@studio.com"])


class TestContactLineCascade:
    def test_role_name_phone(self, lib):
        rule, fields = lib.match_contact_line("Photographer: Coni Tarallo / 929.250.6798")
        assert rule.name == "role_name_phone"
        assert fields["name"] == "Coni Tarallo"
        assert fields["role"] == "Photographer"
        assert fields["phone"] == "(929) 250-6798"

    def test_role_name_company_phone(self, lib):
        rule, fields = lib.match_contact_line("Gaffer: Tom Reyes / Bright Lights Rentals / (310) 555-0142")
        assert rule.name == "role_name_company_phone"
        assert fields["company"] == "Bright Lights Rentals"
        assert fields["phone"] == "(310) 555-0142"

    def test_pipe_fields(self, lib):
        rule, fields = lib.match_contact_line("JOHN SMITH | john@studio.com | (555) 123-4567 | Director")
        assert rule.name == "pipe_fields"
        assert fields["name"] == "John Smith"
        assert fields["email"] == "john@studio.com"
        assert fields["role"] == "Director"

    def test_name_dash_phone(self, lib):
        rule, fields = lib.match_contact_line("Lena Ortiz - (310) 555-0199")
        assert rule.name == "name_dash_phone"
        assert fields["name"] == "Lena Ortiz"

    def test_no_contact(self, lib):
        assert lib.match_contact_line("Lunch will be served at noon") is None


def test_library_is_shared_and_immutable(lib):
    assert get_pattern_library() is lib
    assert isinstance(lib, PatternLibrary)
    with pytest.raises(TypeError):
        lib.role_titles["new"] = "New"
