# tests/conftest.py
from __future__ import annotations

import pytest

from scyllanode.cluster.context import TestRunContext
from scyllanode.cluster.resolve import Resolver
from scyllanode.config.models import HarnessSettings
from scyllanode.errors import RemoteCommandError

ADDRESSES = {"a": "10.0.0.1", "b": "10.0.0.2", "c": "10.0.0.3"}


class FakeRemote:
    """
    Stands in for scyllanode.remote.pool.Remote. Records every command; a
    response is the first value in ``responses`` whose key is a substring of
    the command. Values are stdout strings, RemoteCommandError-producing ints
    (the exit code), or callables returning either.
    """

    def __init__(self, responses=None, files=None):
        self.commands = []          # (node, cmd)
        self.uploads = []           # (node, path, content)
        self.responses = responses or {}
        self.files = dict(files or {})

    def _answer(self, node, cmd):
        for key, value in self.responses.items():
            if key in cmd:
                value = value(node, cmd) if callable(value) else value
                if isinstance(value, int):
                    raise RemoteCommandError(node, cmd, value, "boom")
                return value
        return ""

    def execute(self, node, cmd, *, sudo=True, timeout=None):
        self.commands.append((node, cmd))
        return self._answer(node, cmd)

    def execute_quietly(self, node, cmd, *, sudo=True):
        try:
            self.execute(node, cmd, sudo=sudo)
            return True
        except RemoteCommandError:
            return False

    def upload_text(self, node, content, remote_path, *, sudo=True):
        self.uploads.append((node, remote_path, content))
        self.files[(node, remote_path)] = content

    def read_text(self, node, remote_path):
        self.commands.append((node, f"cat {remote_path}"))
        return self.files[(node, remote_path)]

    def exists(self, node, remote_path):
        return (node, remote_path) in self.files

    def cmds(self, node=None):
        return [c for n, c in self.commands if node is None or n == node]


@pytest.fixture
def settings() -> HarnessSettings:
    return HarnessSettings.model_validate({
        "version": "4.6",
        "nodes": [{"hostname": n, "address": a} for n, a in ADDRESSES.items()],
    })


@pytest.fixture
def ctx(settings) -> TestRunContext:
    return TestRunContext(settings=settings, resolver=Resolver(ADDRESSES), run_id="run-1")


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def make_remote():
    return FakeRemote
