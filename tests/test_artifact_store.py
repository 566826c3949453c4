import pytest

from services.artifact_store import ArtifactStoreError, LocalArtifactStore


class TestLocalArtifactStore:

    def test_put_then_get(self, tmp_path):
        store = LocalArtifactStore(str(tmp_path), public_prefix="/leases")
        url = store.put(b"%PDF-1.4 data", "lease-1-v1-1700000000000.pdf")
        assert url == "/leases/lease-1-v1-1700000000000.pdf"
        assert store.get(url) == b"%PDF-1.4 data"

    def test_existing_artifact_is_never_overwritten(self, tmp_path):
        store = LocalArtifactStore(str(tmp_path))
        store.put(b"first", "lease-1.pdf")
        with pytest.raises(ArtifactStoreError):
            store.put(b"second", "lease-1.pdf")
        assert store.get("/leases/lease-1.pdf") == b"first"

    @pytest.mark.parametrize("name", ["../escape.pdf", "nested/lease.pdf", ""])
    def test_path_components_are_rejected(self, tmp_path, name):
        store = LocalArtifactStore(str(tmp_path))
        with pytest.raises(ArtifactStoreError):
            store.put(b"data", name)

    def test_unknown_url_is_rejected(self, tmp_path):
        store = LocalArtifactStore(str(tmp_path))
        with pytest.raises(ArtifactStoreError):
            store.get("https://elsewhere.example.com/lease.pdf")

    def test_missing_artifact_raises(self, tmp_path):
        store = LocalArtifactStore(str(tmp_path))
        with pytest.raises(ArtifactStoreError):
            store.get("/leases/missing.pdf")
