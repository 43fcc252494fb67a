"""Shared test fixtures for chatstack tests."""
import os
from pathlib import Path

import pytest

from chatstack.models.stack import StackConfig
from chatstack.services.docker import ContainerRuntime

# Trimmed version of what `synapse generate` writes
GENERATED_HOMESERVER = """\
# Configuration file for Synapse.
#
# This is a YAML file: see [1] for a quick introduction. Note in particular
# that *indentation is important*: all the elements of a list or dictionary
# should have the same indentation.
#
# [1] https://docs.ansible.com/ansible/latest/reference_appendices/YAMLSyntax.html
#
# For more information on how to configure Synapse, including a complete accounting of
# each option, go to docs/usage/configuration/config_documentation.md or
# https://element-hq.github.io/synapse/latest/usage/configuration/config_documentation.html
server_name: "example.org"
pid_file: /data/homeserver.pid
listeners:
  - port: 8008
    tls: false
    type: http
    x_forwarded: true
    resources:
      - names: [client, federation]
        compress: false
database:
  name: sqlite3
  args:
    database: /data/homeserver.db
log_config: "/data/example.org.log.config"
media_store_path: /data/media_store
registration_shared_secret: "Xk3tA9"
report_stats: false
macaroon_secret_key: "Pq7wZ2"
form_secret: "Lm4nB8"
signing_key_path: "/data/example.org.signing.key"
trusted_key_servers:
  - server_name: "matrix.org"


# vim:ft=yaml
"""

GENERATED_REGISTRATION = """\
id: whatsapp
url: http://localhost:29318
as_token: as-token
hs_token: hs-token
sender_localpart: wa_bot
rate_limited: false
namespaces:
  users:
    - regex: ^@whatsapp_.*:example\\.org$
      exclusive: true
"""


class FakeRuntime(ContainerRuntime):
    """ContainerRuntime that writes fixture documents and records calls."""

    def __init__(self, homeserver_text: str = GENERATED_HOMESERVER,
                 registration_text: str = GENERATED_REGISTRATION):
        super().__init__(mock=False)
        self.homeserver_text = homeserver_text
        self.registration_text = registration_text
        self.calls = []

    def generate_homeserver_config(self, data_dir, server_name):
        self.calls.append(("generate_homeserver_config", server_name))
        path = Path(data_dir) / "homeserver.yaml"
        path.write_text(self.homeserver_text)
        return path

    def generate_bridge_registration(self, bridge_dir):
        self.calls.append(("generate_bridge_registration", Path(bridge_dir)))
        path = Path(bridge_dir) / "wa-registration.yaml"
        if self.registration_text is not None:
            path.write_text(self.registration_text)
        return path

    def compose_pull(self, manifest):
        self.calls.append(("compose_pull", Path(manifest)))

    def compose_up(self, manifest):
        self.calls.append(("compose_up", Path(manifest)))

    def call_names(self):
        return [name for name, _ in self.calls]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep CHATSTACK_* settings and exported secrets out of other tests."""
    saved = dict(os.environ)
    for name in list(os.environ):
        if name.startswith("CHATSTACK_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr("chatstack.core.config.CONFIG_PATHS", [])
    yield
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def stack_config(tmp_path):
    """StackConfig for example.org rooted in a temp directory."""
    return StackConfig(
        domain="example.org",
        admin_email="a@example.org",
        root=tmp_path / "synapse",
    )


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def runtime_factory():
    """Build a FakeRuntime with custom generated documents."""
    return FakeRuntime
