"""Playlist control for the MPD music daemon, through ``mpc``."""

from __future__ import annotations

import shutil
import subprocess

from immerse.core.config import ImmerseConfig
from immerse.core.errors import EngineFailure, ToolUnavailable
from immerse.utils.console import console


def check_mpc() -> bool:
    """Check if mpc is available on the system."""
    return shutil.which("mpc") is not None


def _mpc(*args: str) -> str:
    cmd = ["mpc", *args]
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        raise EngineFailure(cmd, result.returncode, result.stderr)
    return result.stdout


def reshuffle(config: ImmerseConfig) -> None:
    """Replace the MPD playlist with the pod's current/ folder, shuffled.

    The folder is addressed relative to the MPD music directory, which is
    ``library.music_dir`` in the config.

    Raises:
        ToolUnavailable: If mpc is not installed.
        EngineFailure: If any mpc call fails (e.g. MPD not running).
    """
    if not check_mpc():
        raise ToolUnavailable("mpc", "brew install mpc  (or: apt install mpc)")

    playlist_dir = f"{config.library.pod_subdir}/current"
    _mpc("update", "--wait", config.library.pod_subdir)
    _mpc("clear")
    _mpc("add", playlist_dir)
    _mpc("shuffle")
    _mpc("play")
    console.print(f"[bold]Playlist reshuffled:[/bold] {playlist_dir}")
