# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/remote/ssh_runner.py

from __future__ import annotations

import uuid
from typing import Optional

import paramiko

from ..utils.shell import shq


class SSHRunner:
    def __init__(self, client: paramiko.SSHClient):
        self.client = client

    def run(
        self,
        cmd: str,
        *,
        sudo: bool = False,
        timeout: Optional[float] = None,
    ) -> tuple[int, str, str]:
        if sudo:
            cmd = f"sudo -S bash -lc {shq(cmd)}"
        else:
            cmd = f"bash -lc {shq(cmd)}"

        stdin, stdout, stderr = self.client.exec_command(cmd, timeout=timeout)
        out = stdout.read().decode("utf-8", "replace")
        err = stderr.read().decode("utf-8", "replace")
        rc = stdout.channel.recv_exit_status()
        return rc, out, err

    def put_text(self, content: str, remote_path: str, *, sudo: bool = False) -> None:
        if sudo:
            tmp = f"/tmp/.scyllanode.tmp.{uuid.uuid4().hex}"
            self.put_text(content, tmp)
            rc, _, err = self.run(f"mv {shq(tmp)} {shq(remote_path)}", sudo=True)
            if rc != 0:
                raise IOError(f"could not move {tmp} to {remote_path}: {err.strip()}")
            return

        sftp = self.client.open_sftp()
        try:
            with sftp.open(remote_path, "w") as f:
                f.write(content)
        finally:
            sftp.close()

    def close(self) -> None:
        self.client.close()
