"""
Module 04 - Distribution Unit Tests
Tests for core/distribution (build, verify, save/load, claims CSV)
"""
import csv
import json

import pytest
from pydantic import ValidationError

from core.allocation import Allocation, LeafEncoding
from core.crypto.hashing import HashAlgorithm, TreeHasher, sha256, to_hex
from core.distribution import (
    DISTRIBUTION_FORMAT_VERSION,
    Distribution,
    audit_distribution,
    build_distribution,
    load_distribution,
    save_claims_csv,
    save_distribution,
    verify_claim,
)
from core.merkle import ProofStep
from core.schemas.errors import DistributionFormatError, InvalidInputError

from fixtures.common import SCENARIO_RECORDS, make_address, make_allocations, make_distribution


def scenario_allocations() -> list[Allocation]:
    rows = [record.split(":") for record in SCENARIO_RECORDS]
    return [Allocation(recipient=name, amount=amount) for name, amount in rows]


class TestBuildDistribution:
    """Building the campaign document."""

    def test_text_scenario_root(self):
        distribution, tree = build_distribution("spring", scenario_allocations())

        a, b, c = (sha256(r.encode()) for r in SCENARIO_RECORDS)
        assert distribution.merkle_root == to_hex(sha256(sha256(a + b) + sha256(c + c)))
        assert distribution.merkle_root == to_hex(tree.get_root())

    def test_claim_entries(self):
        distribution, tree = build_distribution("spring", scenario_allocations())

        bob = distribution.claims["bob"]
        assert bob.index == 1
        assert bob.amount == "200"
        assert bob.leaf == to_hex(sha256(b"bob:200"))
        assert [entry.position for entry in bob.proof] == ["left", "right"]
        assert bob.proof[0].hash == to_hex(sha256(b"alice:100"))

    def test_metadata(self):
        distribution, _ = make_distribution(count=4)

        assert distribution.format_version == DISTRIBUTION_FORMAT_VERSION
        assert distribution.leaf_count == 4
        assert distribution.token_total == str(1000 + 2000 + 3000 + 4000)
        assert distribution.leaf_encoding is LeafEncoding.PACKED
        assert distribution.hash_algorithm is HashAlgorithm.SHA256
        assert distribution.domain_separated is False

    def test_packed_claims_keyed_by_lowercase_address(self):
        upper = "0x" + "AB" * 20
        distribution, _ = build_distribution(
            "c", [Allocation(recipient=upper, amount=1)], encoding="packed"
        )

        assert list(distribution.claims) == [upper.lower()]
        assert distribution.get_claim(upper) is not None
        assert distribution.claims[upper.lower()].recipient == upper

    def test_hasher_recorded(self):
        hasher = TreeHasher(algorithm=HashAlgorithm.KECCAK256, domain_separated=True)
        distribution, _ = make_distribution(hasher=hasher)

        assert distribution.hasher() == hasher

    def test_order_changes_root(self):
        allocations = make_allocations(4)
        first, _ = build_distribution("c", allocations, encoding="packed")
        second, _ = build_distribution("c", list(reversed(allocations)), encoding="packed")

        assert first.merkle_root != second.merkle_root

    def test_empty_rejected(self):
        with pytest.raises(InvalidInputError):
            build_distribution("c", [])

    def test_duplicates_rejected(self):
        allocations = [Allocation(recipient="a", amount=1), Allocation(recipient="a", amount=1)]

        with pytest.raises(InvalidInputError, match="Duplicate"):
            build_distribution("c", allocations)

    def test_packed_needs_addresses(self):
        with pytest.raises(InvalidInputError):
            build_distribution("c", scenario_allocations(), encoding=LeafEncoding.PACKED)


class TestVerifyClaim:
    """Claim verification never raises and rejects every mismatch."""

    def test_every_claim_verifies(self, distribution):
        for claim in distribution.claims.values():
            assert verify_claim(distribution, claim.recipient, claim.amount)
            assert verify_claim(distribution, claim.recipient, int(claim.amount))

    def test_address_case_ignored_for_packed(self):
        address = "0x" + "ab" * 20
        distribution, _ = build_distribution(
            "c", [Allocation(recipient=address, amount=7)], encoding="packed"
        )

        assert verify_claim(distribution, "0x" + "AB" * 20, 7)

    def test_wrong_amount(self, distribution):
        assert not verify_claim(distribution, make_address(0), 1001)

    def test_unknown_recipient(self, distribution):
        assert not verify_claim(distribution, make_address(99), 1000)

    def test_malformed_inputs(self, distribution):
        assert not verify_claim(distribution, "alice", 1000)
        assert not verify_claim(distribution, make_address(0), "-1")
        assert not verify_claim(distribution, make_address(0), 1000, proof=[{"hash": "zz"}])
        assert not verify_claim(distribution, make_address(0), 1000, proof=[{"position": "left"}])

    def test_explicit_proof_forms(self, distribution):
        claim = distribution.get_claim(make_address(2))
        as_dicts = [entry.model_dump() for entry in claim.proof]
        as_steps = [ProofStep.from_dict(d) for d in as_dicts]

        assert verify_claim(distribution, make_address(2), 3000, claim.proof)
        assert verify_claim(distribution, make_address(2), 3000, as_dicts)
        assert verify_claim(distribution, make_address(2), 3000, as_steps)

    def test_proof_of_another_recipient_fails(self, distribution):
        other = distribution.get_claim(make_address(1))
        assert not verify_claim(distribution, make_address(0), 1000, other.proof)

    def test_tampered_root(self, distribution):
        root = bytearray.fromhex(distribution.merkle_root[2:])
        root[0] ^= 0x01
        tampered = distribution.model_copy(update={"merkle_root": "0x" + root.hex()})

        assert not verify_claim(tampered, make_address(0), 1000)

    def test_domain_separated_distribution(self):
        hasher = TreeHasher(domain_separated=True)
        distribution, _ = make_distribution(count=3, hasher=hasher)

        assert verify_claim(distribution, make_address(1), 2000)

        plain = distribution.model_copy(update={"domain_separated": False})
        assert not verify_claim(plain, make_address(1), 2000)


class TestAudit:
    """Whole-distribution consistency check."""

    def test_consistent(self, distribution):
        assert audit_distribution(distribution) == []

    def test_tampered_amount(self, distribution):
        key = make_address(3)
        claims = dict(distribution.claims)
        claims[key] = claims[key].model_copy(update={"amount": "1"})
        tampered = distribution.model_copy(update={"claims": claims})

        assert audit_distribution(tampered) == [key]


class TestDistributionIO:
    """Saving and loading distribution files."""

    def test_round_trip(self, tmp_path, distribution):
        path = save_distribution(distribution, tmp_path / "out" / "merkle.json")

        loaded = load_distribution(path)

        assert loaded == distribution
        assert audit_distribution(loaded) == []

    def test_canonical_bytes_stable(self, tmp_path, distribution):
        first = save_distribution(distribution, tmp_path / "a.json").read_bytes()
        second = save_distribution(load_distribution(tmp_path / "a.json"), tmp_path / "b.json").read_bytes()

        assert first == second
        assert first.endswith(b"\n")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_distribution(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(DistributionFormatError, match="Invalid JSON"):
            load_distribution(path)

    def test_duplicate_claim_key_rejected(self, tmp_path, distribution):
        path = save_distribution(distribution, tmp_path / "merkle.json")
        text = path.read_text(encoding="utf-8")
        key = make_address(0)
        claim = json.dumps(distribution.claims[key].model_dump(mode="json"), separators=(",", ":"))
        # Append a second entry for the same recipient inside "claims"
        path.write_text(text.replace('"claims":{', f'"claims":{{"{key}":{claim},', 1), encoding="utf-8")

        with pytest.raises(DistributionFormatError, match="Duplicate key") as exc_info:
            load_distribution(path)

        assert exc_info.value.details["key"] == key

    def test_float_value_rejected(self, tmp_path, distribution):
        data = distribution.model_dump(mode="json")
        data["leaf_count"] = 5.0
        path = tmp_path / "merkle.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(DistributionFormatError, match="Floats"):
            load_distribution(path)

    def test_invalid_document(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"campaign_id": "x"}), encoding="utf-8")

        with pytest.raises(DistributionFormatError) as exc_info:
            load_distribution(path)

        assert exc_info.value.details["path"] == str(path)
        assert exc_info.value.details["errors"]

    def test_get_claim_unknown(self, distribution):
        assert distribution.get_claim("not-an-address") is None

    def test_claims_by_index(self, distribution):
        assert [c.index for c in distribution.claims_by_index()] == list(range(5))

    def test_claims_csv(self, tmp_path):
        distribution, _ = build_distribution("spring", scenario_allocations())

        path = save_claims_csv(distribution, tmp_path / "claims.csv")

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [r["recipient"] for r in rows] == ["alice", "bob", "carol"]
        assert rows[2]["index"] == "2"
        proof = json.loads(rows[2]["proof"])
        assert proof[0] == {"hash": to_hex(sha256(b"carol:150")), "position": "right"}

    def test_model_validate_rejects_bad_position(self, distribution):
        data = distribution.model_dump(mode="json")
        first = next(iter(data["claims"]))
        data["claims"][first]["proof"][0]["position"] = "middle"

        with pytest.raises(ValidationError):
            Distribution.model_validate(data)
