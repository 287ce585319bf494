"""Tests for the openssl subprocess primitive."""

from __future__ import annotations

import asyncio
import shutil
import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sealgate.vault.openssl import PASSPHRASE_ENV, build_command, build_env, run_openssl


def _mock_proc(returncode=0, stdout=b"", stderr=b""):
    proc = MagicMock()
    proc.pid = 4242
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class TestCommand:
    def test_fixed_kdf_and_cipher(self):
        cmd = build_command("/srv/file.bin")
        assert cmd[:5] == ["openssl", "enc", "-d", "-pbkdf2", "-chacha20"]
        assert cmd[-2:] == ["-in", "/srv/file.bin"]

    def test_passphrase_by_env_reference(self):
        cmd = build_command("/srv/file.bin", binary="/usr/bin/openssl")
        assert cmd[0] == "/usr/bin/openssl"
        assert f"-pass=env:{PASSPHRASE_ENV}" in cmd

    def test_env_carries_passphrase(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/test")
        env = build_env(b"hunter2")
        assert env[PASSPHRASE_ENV.encode()] == b"hunter2"
        assert env[b"HOME"] == b"/home/test"


class TestRun:
    @pytest.mark.asyncio
    async def test_secret_never_in_argv(self):
        proc = _mock_proc(0, b"plain")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as spawn:
            result = await run_openssl(Path("/srv/f.bin"), b"hunter2")
        assert result == (0, b"plain", b"")
        args, kwargs = spawn.call_args
        assert all("hunter2" not in str(a) for a in args)
        assert kwargs["env"][PASSPHRASE_ENV.encode()] == b"hunter2"
        assert kwargs["stdin"] == asyncio.subprocess.DEVNULL

    @pytest.mark.asyncio
    async def test_nonzero_exit_returned(self):
        proc = _mock_proc(1, b"", b"bad decrypt")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            assert await run_openssl("/srv/f.bin", b"pw") == (1, b"", b"bad decrypt")

    @pytest.mark.asyncio
    async def test_spawn_failure_raises(self):
        with patch(
            "asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("openssl"))
        ):
            with pytest.raises(FileNotFoundError):
                await run_openssl("/srv/f.bin", b"pw")

    @pytest.mark.asyncio
    async def test_cancellation_kills_child(self):
        proc = _mock_proc()
        gate = asyncio.Event()

        async def never(*args, **kwargs):
            await gate.wait()
            return b"", b""

        proc.communicate = never
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            task = asyncio.ensure_future(run_openssl("/srv/f.bin", b"pw"))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()


@pytest.mark.skipif(shutil.which("openssl") is None, reason="openssl binary not installed")
class TestRealOpenSSL:
    def _encrypt(self, path: Path, data: bytes, passphrase: str) -> None:
        subprocess.run(
            ["openssl", "enc", "-e", "-pbkdf2", "-chacha20", "-pass", "env:PW", "-out", str(path)],
            input=data,
            env={"PW": passphrase, "PATH": "/usr/bin:/bin:/usr/local/bin"},
            check=True,
        )

    @pytest.mark.asyncio
    async def test_decrypts_openssl_fixture(self, tmp_path: Path):
        target = tmp_path / "fixture.enc"
        self._encrypt(target, b"openssl plaintext", "s3cret")
        code, out, _ = await run_openssl(target, b"s3cret")
        assert code == 0
        assert out == b"openssl plaintext"

    @pytest.mark.asyncio
    async def test_not_salted_input_fails(self, tmp_path: Path):
        target = tmp_path / "junk.bin"
        target.write_bytes(b"this was never encrypted")
        code, _, err = await run_openssl(target, b"s3cret")
        assert code != 0
        assert err

    @pytest.mark.asyncio
    async def test_wrong_passphrase_exits_zero_with_garbage(self, tmp_path: Path):
        # No authentication tag: this is why the backend needs an explicit opt-in
        target = tmp_path / "fixture.enc"
        self._encrypt(target, b"top secret plaintext", "right")
        code, out, _ = await run_openssl(target, b"wrong")
        assert code == 0
        assert out != b"top secret plaintext"
