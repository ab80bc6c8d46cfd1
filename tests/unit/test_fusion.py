"""Tests for candidate fusion and similarity."""
import itertools

import pytest

from callsheet.extraction.fast.fusion import fuse, identity_key, merge_candidates
from callsheet.extraction.fast.similarity import candidate_similarity, name_similarity
from callsheet.extraction.types import ContactCandidate


def _contact(**kwargs):
    kwargs.setdefault("confidence", 0.7)
    kwargs.setdefault("origin", "line-by-line")
    return ContactCandidate(**kwargs)


class TestIdentityKey:
    def test_phone_wins(self):
        c = _contact(name="Ann Lee", email="ann@x.com", phone="+1 (212) 555-0101")
        assert identity_key(c) == "phone:2125550101"

    def test_email_then_name(self):
        assert identity_key(_contact(name="Ann Lee", email="Ann@X.com")) == "email:ann@x.com"
        assert identity_key(_contact(name="Ann  Lee")) == "name:annlee"

    def test_empty(self):
        assert identity_key(ContactCandidate()) is None


class TestMerge:
    def test_first_value_wins_and_gaps_are_filled(self):
        first = _contact(name="Ann Lee", phone="(212) 555-0101", confidence=0.85, origin="tabular")
        second = _contact(name="Ann L.", email="ann@x.com", role="Editor", origin="freeform")
        merged = merge_candidates(first, second)
        assert merged.name == "Ann Lee"
        assert merged.email == "ann@x.com"
        assert merged.role == "Editor"
        assert merged.confidence == 0.85
        assert merged.origin == "freeform, tabular"

    def test_inputs_are_untouched(self):
        first = _contact(name="Ann Lee")
        merge_candidates(first, _contact(email="ann@x.com"))
        assert first.email is None


class TestSimilarity:
    def test_name_similarity(self):
        assert name_similarity("John Smith", "JOHN  SMITH") == 1.0
        assert name_similarity("John Smith", "Jon Smith") == pytest.approx(0.9)
        assert name_similarity("", "Jon Smith") == 0.0

    def test_only_shared_fields_count(self):
        a = _contact(name="John Smith", phone="555-123-4567")
        b = _contact(name="John Smith", email="john@x.com")
        assert candidate_similarity(a, b) == 1.0

    def test_disjoint_fields_score_zero(self):
        assert candidate_similarity(_contact(phone="555-123-4567"), _contact(email="a@x.com")) == 0.0

    def test_conflicting_phone_lowers_score(self):
        a = _contact(name="John Smith", phone="555-123-4567")
        b = _contact(name="John Smith", phone="555-999-0000")
        assert candidate_similarity(a, b) == 0.5


class TestFuse:
    def test_near_duplicate_names_merge(self):
        outcome = fuse([
            _contact(name="John Smith", phone="(555) 123-4567"),
            _contact(name="Jon Smith", email="john@x.com"),
        ])
        assert len(outcome.contacts) == 1
        merged = outcome.contacts[0]
        assert merged.name == "John Smith"
        assert merged.phone == "(555) 123-4567"
        assert merged.email == "john@x.com"
        assert outcome.duplicates_removed == 1

    def test_same_phone_merges_across_pools(self):
        table = [_contact(name="Ann Lee", phone="(212) 555-0101", confidence=0.85, origin="tabular")]
        lines = [_contact(name="Ann Lee", phone="212.555.0101", role="Editor")]
        outcome = fuse(table, lines)
        assert len(outcome.contacts) == 1
        assert outcome.contacts[0].role == "Editor"
        assert outcome.contacts[0].phone == "(212) 555-0101"
        assert outcome.contacts[0].origin == "line-by-line, tabular"

    def test_different_people_stay_apart(self):
        outcome = fuse([
            _contact(name="Ann Lee", email="ann@x.com"),
            _contact(name="Bo Park", email="bo@x.com"),
        ])
        assert {c.name for c in outcome.contacts} == {"Ann Lee", "Bo Park"}
        assert outcome.duplicates_removed == 0

    def test_invalid_candidates_are_dropped(self):
        outcome = fuse([ContactCandidate(role="Gaffer"), _contact(name="Ann Lee")])
        assert outcome.input_count == 1
        assert [c.name for c in outcome.contacts] == ["Ann Lee"]

    def test_threshold_is_strict(self):
        pair = [_contact(name="John Smith"), _contact(name="Jon Smith")]
        assert len(fuse(pair, threshold=0.9).contacts) == 2
        assert len(fuse(pair, threshold=0.89).contacts) == 1

    def test_result_does_not_depend_on_input_order(self):
        candidates = [
            _contact(name="John Smith", phone="(555) 123-4567"),
            _contact(name="Jon Smith", email="john@x.com", role="Director", origin="freeform"),
            _contact(name="JOHN SMITH", phone="555.123.4567", confidence=0.9, origin="tabular"),
            _contact(name="Sarah Johnson", email="sarah@agency.com"),
        ]
        expected = [c.to_dict() for c in fuse(candidates).contacts]
        for ordering in itertools.permutations(candidates):
            assert [c.to_dict() for c in fuse(list(ordering)).contacts] == expected

    def test_fuzzy_merges_do_not_rescan_from_the_start(self, monkeypatch):
        import callsheet.extraction.fast.fusion as fusion

        calls = []

        def counting_similarity(a, b):
            calls.append((a.name, b.name))
            return candidate_similarity(a, b)

        monkeypatch.setattr(fusion, "candidate_similarity", counting_similarity)
        letters = "abcdefghijklmnopqrstuvwxyz"
        candidates = []
        for i in range(26):
            name = f"{letters[i] * 5} {letters[(i + 13) % 26] * 5}".title()
            candidates.append(_contact(name=name, phone=f"(212) 555-{i:04d}"))
            candidates.append(_contact(name=name, email=f"p{i}@crew.com", origin="freeform"))

        outcome = fuse(candidates)

        assert len(outcome.contacts) == 26
        assert all(c.phone and c.email for c in outcome.contacts)
        assert len(calls) <= len(candidates) ** 2
