"""Environment lookups and helpers shared by the resolver and statistics."""

import hashlib
import os
import subprocess
from collections.abc import Mapping
from pathlib import Path

QODANA_DOCKER_ENV = "QODANA_DOCKER"
QODANA_TREAT_AS_RELEASE_ENV = "QODANA_TREAT_AS_RELEASE"
QODANA_REMOTE_URL_ENV = "QODANA_REMOTE_URL"
QODANA_NET_TARGET_FRAMEWORKS_ENV = "QODANA_NET_TARGET_FRAMEWORKS"
DEVICE_ID_ENV = "DEVICEID"
SALT_ENV = "SALT"

EMPTY_HASH = "0" * 32
DEVICE_ID_SALT_PREFIX = "1n1T-$@Lt-"
SALT_SALT_PREFIX = "$eC0nd-$@Lt-"
DEVICE_ID_PREFIX = "200820300000000"


def _env(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def is_container(environ: Mapping[str, str] | None = None) -> bool:
    """Check if we are running inside the engine container."""
    return bool(_env(environ).get(QODANA_DOCKER_ENV))


def treat_as_release(environ: Mapping[str, str] | None = None) -> bool:
    return _env(environ).get(QODANA_TREAT_AS_RELEASE_ENV) == "true"


def target_frameworks_override(environ: Mapping[str, str] | None = None) -> str:
    return _env(environ).get(QODANA_NET_TARGET_FRAMEWORKS_ENV, "")


def quote_if_space(value: str) -> str:
    """Wrap a value in double quotes if it contains a space."""
    if " " in value:
        return f'"{value}"'
    return value


def get_remote_url(project_path: Path | None = None, environ: Mapping[str, str] | None = None) -> str:
    """Return the remote URL of the project repository, or an empty string.

    ``QODANA_REMOTE_URL`` wins over the ``origin`` remote of the git
    repository at ``project_path``.
    """
    url = _env(environ).get(QODANA_REMOTE_URL_ENV, "")
    if not url:
        try:
            result = subprocess.run(
                ["git", "remote", "get-url", "origin"],
                cwd=project_path,
                capture_output=True,
                text=True,
                check=True,
                timeout=10,
            )
        except (OSError, subprocess.SubprocessError):
            return ""
        url = result.stdout
    return url.strip()


def _md5(value: str) -> str:
    return hashlib.md5(value.encode("utf-8"), usedforsecurity=False).hexdigest()


def derive_device_id_salt(remote_url: str) -> tuple[str, str]:
    """Derive the pseudo-anonymous (device id, salt) pair from a remote URL."""
    url_hash = _md5(DEVICE_ID_SALT_PREFIX + remote_url) if remote_url else EMPTY_HASH
    salt = _md5(SALT_SALT_PREFIX + url_hash)
    device_id = f"{DEVICE_ID_PREFIX}-{url_hash[0:4]}-{url_hash[4:8]}-{url_hash[8:12]}-{url_hash[12:24]}"
    return device_id, salt


def get_device_id_salt(
    remote_url: str | None = None,
    project_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[str, str]:
    """Return the device identity for statistics.

    Values provided through ``DEVICEID`` and ``SALT`` are kept; whichever is
    missing is derived from the repository remote URL.
    """
    env = _env(environ)
    device_id = env.get(DEVICE_ID_ENV, "")
    salt = env.get(SALT_ENV, "")
    if device_id and salt:
        return device_id, salt

    if remote_url is None:
        remote_url = get_remote_url(project_path, environ)
    derived_id, derived_salt = derive_device_id_salt(remote_url)
    return device_id or derived_id, salt or derived_salt
