"""Simple .env loader and runner.

Usage:
  - Import and call `load()` or `initialize_env_vars()` from Python.
  - Run the server with the .env loaded:
      python set_env_vars.py --exec python main.py
"""
from __future__ import annotations

import os
import pathlib
import subprocess
from typing import Dict, List, Optional

WOLFRAM_KEYS = ("WOLFRAM_APP_ID", "WOLFRAM_APPID", "WOLFRAM_ALPHA_API_KEY")
KNOWN_KEYS = WOLFRAM_KEYS + (
    "WOLFRAM_BASE_URL",
    "WOLFRAM_TIMEOUT_S",
    "PLOT_X_MIN",
    "PLOT_X_MAX",
    "PLOT_STEP",
    "LOG_LEVEL",
)


def _parse_dotenv(path: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for raw in fh:
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                val = val.strip()
                if not key:
                    continue
                if len(val) >= 2 and val[0] == val[-1] and val[0] in ("\"", "'"):
                    val = val[1:-1]
                pairs[key] = val
    except FileNotFoundError:
        return {}
    return pairs


def load(path: str = ".env", override: bool = False) -> None:
    """Load key=value pairs from `path` into os.environ.

    Args:
        path: path to .env file (default: .env)
        override: if True, overwrite existing environment variables
    """
    for k, v in _parse_dotenv(path).items():
        if override or k not in os.environ:
            os.environ[k] = v


def _coalesce_env(keys: tuple) -> Optional[str]:
    for k in keys:
        v = os.environ.get(k)
        if v:
            return v
    return None


def initialize_env_vars(
    *,
    wolfram_app_id: Optional[str] = None,
    dotenv_paths: Optional[List[str]] = None,
    override_existing: bool = False,
) -> Dict[str, bool]:
    """Load the known settings from .env files and mirror the Wolfram key under every alias."""
    repo_root = pathlib.Path(__file__).resolve().parent
    candidates = [repo_root / ".env", repo_root / ".env.local"]
    if dotenv_paths:
        candidates = [pathlib.Path(p).expanduser().resolve() for p in dotenv_paths] + candidates

    loaded: Dict[str, str] = {}
    for p in candidates:
        loaded.update(_parse_dotenv(str(p)))

    def set_env(k: str, v: Optional[str]) -> None:
        if not v:
            return
        if not override_existing and os.environ.get(k):
            return
        os.environ[k] = v

    if wolfram_app_id:
        set_env("WOLFRAM_APP_ID", wolfram_app_id)

    for k, v in loaded.items():
        if k in KNOWN_KEYS:
            set_env(k, v)

    w = _coalesce_env(WOLFRAM_KEYS)
    for k in WOLFRAM_KEYS:
        set_env(k, w)

    return {"wolfram_app_id_set": bool(_coalesce_env(WOLFRAM_KEYS))}


def run_command_with_env(cmd: list[str]) -> int:
    """Run a command (list form) with the current process environment and return exit code."""
    return subprocess.run(cmd, env=os.environ).returncode


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Load .env and optionally run a command with it.")
    parser.add_argument("--env-file", "-e", default=".env", help="Path to .env file")
    parser.add_argument("--override", action="store_true", help="Override existing env vars")
    parser.add_argument("--exec", "-x", nargs=argparse.REMAINDER, help="Command to run with env loaded")
    args = parser.parse_args()

    load(args.env_file, override=args.override)
    status = initialize_env_vars()

    if args.exec:
        cmd = args.exec
        if not cmd:
            parser.error("--exec requires a command to run")
        raise SystemExit(run_command_with_env(cmd))
    else:
        print(f"Loaded environment from {args.env_file}: {status}")
