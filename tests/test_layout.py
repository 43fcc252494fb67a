"""Tests for the stack directory layout."""
import stat

from chatstack.core.layout import StackLayout


class TestStackLayout:

    def test_creates_directories(self, tmp_path):
        layout = StackLayout(tmp_path / "synapse")
        layout.ensure()

        for name in [
            "data/synapse",
            "data/postgres",
            "traefik",
            "coturn",
            "livekit",
            "mautrix-whatsapp/whatsmeow",
            "element",
        ]:
            assert (tmp_path / "synapse" / name).is_dir(), name

    def test_acme_storage_permissions(self, tmp_path):
        """Traefik requires acme.json to be 0600."""
        layout = StackLayout(tmp_path)
        layout.ensure()

        assert layout.acme_storage.exists()
        assert stat.S_IMODE(layout.acme_storage.stat().st_mode) == 0o600

    def test_ensure_is_idempotent(self, tmp_path):
        layout = StackLayout(tmp_path)
        layout.ensure()
        layout.acme_storage.write_text('{"letsencrypt": {}}')
        layout.acme_storage.chmod(0o644)

        layout.ensure()

        assert layout.acme_storage.read_text() == '{"letsencrypt": {}}'
        assert stat.S_IMODE(layout.acme_storage.stat().st_mode) == 0o600
