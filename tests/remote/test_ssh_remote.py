import types

import pytest

from scyllanode.config.models import HarnessSettings
from scyllanode.errors import RemoteCommandError
from scyllanode.remote.pool import Remote, nodetool
import scyllanode.remote.ssh as ssh_mod
from scyllanode.remote.ssh import SshTarget, open_ssh
from scyllanode.utils.retry import RetryError
from scyllanode.remote.ssh_runner import SSHRunner

# ----------------- Fakes for Paramiko -----------------

class _FakeChannel:
    def __init__(self, rc=0): self._rc = rc
    def recv_exit_status(self): return self._rc

class _Buf:
    def __init__(self, s=""): self._s = s
    def read(self): return self._s.encode()

class _FakeFile:
    def __init__(self, log, path):
        self._buf = []
        self.log = log
        self.path = path
    def write(self, data): self._buf.append(data)
    def __enter__(self): return self
    def __exit__(self, *exc):
        self.log.append(("sftp_write", self.path, "".join(self._buf)))

class FakeSFTP:
    def __init__(self, log): self.log = log
    def open(self, path, mode):
        return _FakeFile(self.log, path)
    def close(self): self.log.append(("sftp_close",))

class FakeSSHClient:
    def __init__(self, log, responses=None):
        self.log = log
        self._responses = responses or {}
    def exec_command(self, cmd, timeout=None):
        self.log.append(("exec", cmd))
        out, err, rc = self._responses.get(cmd, ("", "", 0))
        stdout = _Buf(out)
        stdout.channel = _FakeChannel(rc)
        return types.SimpleNamespace(write=lambda *a, **k: None), stdout, _Buf(err)
    def open_sftp(self):
        return FakeSFTP(self.log)
    def close(self):
        self.log.append(("close",))


def _settings():
    return HarnessSettings.model_validate({
        "nodes": [{"hostname": "n1", "username": "admin"}, {"hostname": "n2", "address": "10.0.0.2"}],
        "ssh": {"username": "ubuntu", "port": 2222},
    })

# ----------------- Tests -----------------

def test_runner_wraps_commands_in_bash_and_sudo():
    ops = []
    runner = SSHRunner(FakeSSHClient(ops))
    runner.run("ps -ef")
    runner.run("echo 'hi'", sudo=True)
    cmds = [c for t, c in ops if t == "exec"]
    assert cmds[0] == "bash -lc 'ps -ef'"
    assert cmds[1] == "sudo -S bash -lc 'echo '\\''hi'\\'''"


def test_put_text_with_sudo_stages_then_moves():
    ops = []
    runner = SSHRunner(FakeSSHClient(ops))
    runner.put_text("cluster_name: x\n", "/etc/scylla/scylla.yaml", sudo=True)

    writes = [e for e in ops if e[0] == "sftp_write"]
    assert len(writes) == 1
    tmp = writes[0][1]
    assert tmp.startswith("/tmp/.scyllanode.tmp.")
    assert writes[0][2] == "cluster_name: x\n"
    assert any(t == "exec" and "mv" in c and "/etc/scylla/scylla.yaml" in c for t, c in ops if t == "exec")


def test_target_applies_node_overrides():
    s = _settings()
    t1 = SshTarget.for_node(s.node("n1"), s.ssh)
    t2 = SshTarget.for_node(s.node("n2"), s.ssh)
    assert (t1.address, t1.username, t1.port) == ("n1", "admin", 2222)
    assert (t2.address, t2.username) == ("10.0.0.2", "ubuntu")


def test_remote_reuses_one_session_per_node():
    ops = []
    opened = []

    def connect(target):
        opened.append(target.hostname)
        return SSHRunner(FakeSSHClient(ops))

    remote = Remote(_settings(), connect=connect)
    remote.execute("n1", "true")
    remote.execute("n1", "true")
    remote.execute("n2", "true")
    assert opened == ["n1", "n2"]

    remote.close()
    assert [e for e in ops if e[0] == "close"] == [("close",), ("close",)]


def test_execute_raises_on_nonzero_and_quietly_does_not():
    ops = []
    responses = {"sudo -S bash -lc 'killall scylla'": ("", "scylla: no process found", 1)}
    remote = Remote(_settings(), connect=lambda t: SSHRunner(FakeSSHClient(ops, responses)))

    with pytest.raises(RemoteCommandError) as exc:
        remote.execute("n1", "killall scylla")
    assert exc.value.rc == 1
    assert exc.value.node == "n1"
    assert "no process found" in str(exc.value)

    assert remote.execute_quietly("n1", "killall scylla") is False
    assert remote.execute_quietly("n1", "true") is True


def test_nodetool_quotes_arguments():
    ops = []
    remote = Remote(_settings(), connect=lambda t: SSHRunner(FakeSSHClient(ops)))
    nodetool(remote, "n1", "decommission")
    assert ("exec", "sudo -S bash -lc 'nodetool '\\''decommission'\\'''") in ops


class FlakySSHClient:
    """paramiko.SSHClient stand-in whose first `failures` connects are refused."""
    attempts = 0
    failures = 0

    def set_missing_host_key_policy(self, policy): pass

    def connect(self, **kwargs):
        FlakySSHClient.attempts += 1
        if FlakySSHClient.attempts <= FlakySSHClient.failures:
            raise OSError("connection refused")

    def close(self): pass


def _flaky(monkeypatch, failures):
    monkeypatch.setattr(FlakySSHClient, "attempts", 0)
    monkeypatch.setattr(FlakySSHClient, "failures", failures)
    monkeypatch.setattr(ssh_mod.paramiko, "SSHClient", FlakySSHClient)


def _target(**ssh):
    s = HarnessSettings.model_validate({"nodes": ["n1"], "ssh": ssh})
    return SshTarget.for_node(s.node("n1"), s.ssh)


def test_open_ssh_retries_with_settings_and_backoff(monkeypatch):
    _flaky(monkeypatch, failures=2)
    waits = []

    runner = open_ssh(_target(connect_retries=4, connect_retry_delay=0.5), sleep=waits.append)

    assert isinstance(runner, SSHRunner)
    assert FlakySSHClient.attempts == 3
    assert waits == [0.5, 1.0]


def test_open_ssh_gives_up_after_configured_attempts(monkeypatch):
    _flaky(monkeypatch, failures=10)
    waits = []

    with pytest.raises(RetryError) as exc:
        open_ssh(_target(connect_retries=2, connect_retry_delay=1), sleep=waits.append)

    assert exc.value.attempts == 2
    assert isinstance(exc.value.__cause__, OSError)
    assert FlakySSHClient.attempts == 2
    assert waits == [1]
