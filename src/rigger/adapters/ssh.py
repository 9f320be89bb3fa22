# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/adapters/ssh.py

from __future__ import annotations

import logging
import shlex
import socket
import time
from pathlib import Path, PurePosixPath
from typing import List, Optional

import paramiko

from ..errors import AdapterFailure

log = logging.getLogger("rigger")


def _load_pkey(path: Path) -> Optional[paramiko.PKey]:
    for key_cls in (paramiko.Ed25519Key, paramiko.RSAKey, paramiko.ECDSAKey):
        try:
            return key_cls.from_private_key_file(str(path))
        except paramiko.SSHException:
            continue
    return None


class SSHHost:
    """
    SSH/SFTP access to a provisioned instance. The connection is opened
    lazily and reused for every command until `close()`.
    """

    def __init__(
        self,
        address: str,
        username: str,
        private_key_path: Path,
        port: int = 22,
        connect_timeout: float = 20.0,
        command_timeout: int = 600,
    ):
        self.address = address
        self.username = username
        self.private_key_path = Path(private_key_path)
        self.port = port
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout
        self._client: Optional[paramiko.SSHClient] = None

    # ------------------------- connection -------------------------

    def _connect(self) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        client.connect(
            hostname=self.address,
            port=self.port,
            username=self.username,
            pkey=_load_pkey(self.private_key_path),
            key_filename=None,
            timeout=self.connect_timeout,
            allow_agent=False,
            look_for_keys=False,
        )
        return client

    @property
    def client(self) -> paramiko.SSHClient:
        if self._client is None:
            try:
                self._client = self._connect()
            except (paramiko.SSHException, OSError) as exc:
                raise AdapterFailure(
                    "ssh", f"cannot connect to {self.username}@{self.address}:{self.port}: {exc}"
                ) from exc
        return self._client

    def wait_until_reachable(self, timeout: int = 120, interval: float = 5.0) -> None:
        deadline = time.monotonic() + timeout
        attempt = 0
        while True:
            attempt += 1
            try:
                self._client = self._connect()
                log.info("[ssh] %s reachable after %d attempt(s)", self.address, attempt)
                return
            except (paramiko.SSHException, socket.error, OSError) as exc:
                if time.monotonic() >= deadline:
                    raise AdapterFailure(
                        "ssh", f"{self.address}:{self.port} not reachable after {timeout}s: {exc}"
                    ) from exc
                log.debug("[ssh] attempt %d failed: %s", attempt, exc)
                time.sleep(interval)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # ------------------------- commands -------------------------

    def run(self, command: str, *, sudo: bool = False) -> str:
        if sudo:
            command = f"sudo -n bash -c {shlex.quote(command)}"

        log.info("[ssh] (%s) $ %s", self.address, command)
        try:
            _, stdout, stderr = self.client.exec_command(command, timeout=self.command_timeout)
            out = stdout.read().decode("utf-8", "replace")
            err = stderr.read().decode("utf-8", "replace")
            rc = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, socket.timeout) as exc:
            raise AdapterFailure("ssh", f"'{command}' failed on {self.address}: {exc}") from exc

        if out.strip():
            log.debug("[ssh][stdout]\n%s", out.rstrip())
        if rc != 0:
            raise AdapterFailure(
                "ssh", f"'{command}' exited non-zero on {self.address}", returncode=rc, stderr=err
            )
        return out

    # ------------------------- files -------------------------

    def upload_dir(self, local_dir: Path, remote_dir: str) -> List[str]:
        """
        Recursively upload a directory over SFTP. Returns the remote paths
        written, in upload order.
        """
        uploaded: List[str] = []
        self.run(f"mkdir -p {shlex.quote(remote_dir)}", sudo=True)
        self.run(f"chown -R {shlex.quote(self.username)} {shlex.quote(remote_dir)}", sudo=True)

        try:
            sftp = self.client.open_sftp()
        except paramiko.SSHException as exc:
            raise AdapterFailure("ssh", f"cannot open SFTP session: {exc}") from exc
        try:
            self._put_dir_recursive(sftp, Path(local_dir), PurePosixPath(remote_dir), uploaded)
        except (OSError, paramiko.SSHException) as exc:
            raise AdapterFailure("ssh", f"upload to {remote_dir} failed: {exc}") from exc
        finally:
            sftp.close()

        log.info("[ssh] Uploaded directory: %s -> %s (%d files)", local_dir, remote_dir, len(uploaded))
        return uploaded

    def _put_dir_recursive(self, sftp, local: Path, remote: PurePosixPath, uploaded: List[str]):
        try:
            sftp.mkdir(str(remote))
        except IOError:
            pass  # already exists

        for item in sorted(local.iterdir()):
            rpath = remote / item.name
            if item.is_dir():
                self._put_dir_recursive(sftp, item, rpath, uploaded)
            else:
                sftp.put(str(item), str(rpath))
                uploaded.append(str(rpath))
