# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/remote/ssh.py

from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import paramiko

from ..config.models import NodeSpec, SshSettings
from ..utils.retry import retry
from .ssh_runner import SSHRunner

log = logging.getLogger("scyllanode")


@dataclass(frozen=True)
class SshTarget:
    """Connection details for one node, node overrides applied over defaults."""
    hostname: str
    address: str
    username: str
    port: int = 22
    password: Optional[str] = None
    pkey_path: Optional[Path] = None
    connect_timeout: float = 20.0
    connect_retries: int = 3
    connect_retry_delay: float = 2.0

    @classmethod
    def for_node(cls, node: NodeSpec, ssh: SshSettings) -> "SshTarget":
        return cls(
            hostname=node.hostname,
            address=node.address or node.hostname,
            username=node.username or ssh.username,
            port=node.port or ssh.port,
            password=node.password if node.password is not None else ssh.password,
            pkey_path=node.pkey_path or ssh.pkey_path,
            connect_timeout=ssh.connect_timeout,
            connect_retries=ssh.connect_retries,
            connect_retry_delay=ssh.connect_retry_delay,
        )


def _load_pkey(path: Path):
    for key_cls in (
        paramiko.RSAKey,
        paramiko.Ed25519Key,
        paramiko.ECDSAKey,
    ):
        try:
            return key_cls.from_private_key_file(str(path))
        except paramiko.SSHException:
            continue
    raise paramiko.SSHException(f"Unsupported private key format for {path}")


def _log_connect_retry(hostname: str, attempt: int, exc: Exception) -> None:
    log.debug("[%s] ssh connect attempt %d failed: %s", hostname, attempt, exc)


def _connect(target: SshTarget) -> SSHRunner:
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    pkey = _load_pkey(target.pkey_path) if target.pkey_path else None

    try:
        client.connect(
            hostname=target.address,
            port=target.port,
            username=target.username,
            password=target.password if not pkey else None,
            pkey=pkey,
            timeout=target.connect_timeout,
            allow_agent=True,
            look_for_keys=True,
        )
    except Exception:
        client.close()
        raise

    log.debug("ssh session open to %s (%s@%s:%d)", target.hostname, target.username, target.address, target.port)
    return SSHRunner(client)


def open_ssh(target: SshTarget, *, sleep: Callable[[float], None] = time.sleep) -> SSHRunner:
    """Connect to a node, retrying with doubling waits while it is unreachable."""
    connect = retry(
        retries=target.connect_retries,
        delay=target.connect_retry_delay,
        backoff=2.0,
        retry_on=(OSError, paramiko.SSHException),
        on_retry=functools.partial(_log_connect_retry, target.hostname),
        sleep=sleep,
    )(_connect)
    return connect(target)
