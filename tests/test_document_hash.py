from datetime import datetime

from services.document_hash import compute_document_hash, generate_document_id, verify_document


class TestComputeDocumentHash:

    def test_known_sha256_digest(self):
        assert compute_document_hash(b"abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_single_byte_change_changes_digest(self):
        assert compute_document_hash(b"lease v1") != compute_document_hash(b"lease v2")


class TestGenerateDocumentId:

    def test_format_and_stability(self):
        created = datetime(2026, 3, 1, 12, 30, 0)
        first = generate_document_id(42, 1, created)
        assert first.startswith("LEASE-42-V1-")
        assert len(first.rsplit("-", 1)[1]) == 8
        assert generate_document_id(42, 1, created) == first

    def test_new_version_gets_new_id(self):
        created = datetime(2026, 3, 1, 12, 30, 0)
        assert generate_document_id(42, 1, created) != generate_document_id(42, 2, created)


class TestVerifyDocument:

    def test_matching_bytes_pass(self):
        data = b"%PDF-1.4 sealed"
        valid, message = verify_document(data, compute_document_hash(data))
        assert valid is True
        assert message == "Verification passed"

    def test_tampered_bytes_fail(self):
        valid, message = verify_document(b"tampered", compute_document_hash(b"original"))
        assert valid is False
        assert "Hash mismatch" in message
