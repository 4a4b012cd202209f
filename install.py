#!/usr/bin/env python3
"""Set up a local wabot checkout (works on Linux, macOS, Windows and Termux).

Usage:
    python install.py          # runtime dependencies only
    python install.py --dev    # also pytest and pytest-asyncio
"""

import os
import platform
import shutil
import subprocess
import sys

MIN_PYTHON = (3, 11)
ROOT = os.path.dirname(os.path.abspath(__file__))
VENV = os.path.join(ROOT, ".venv")
DATA_SUBDIRS = ("temp_sticker", "statuses", "auth")
TEMPLATES = {"config.example.yaml": "config.yaml", ".env.example": ".env"}


def require_python() -> None:
    if sys.version_info < MIN_PYTHON:
        need = ".".join(map(str, MIN_PYTHON))
        have = f"{sys.version_info.major}.{sys.version_info.minor}"
        sys.exit(f"wabot needs Python {need} or newer (found {have}).")


def venv_pip() -> str:
    scripts = "Scripts" if platform.system() == "Windows" else "bin"
    return os.path.join(VENV, scripts, "pip")


def install_package(dev: bool) -> None:
    if os.path.isdir(VENV):
        print("[venv] reusing .venv")
    else:
        print("[venv] creating .venv")
        subprocess.check_call([sys.executable, "-m", "venv", VENV])

    pip = venv_pip()
    subprocess.check_call([pip, "install", "--quiet", "--upgrade", "pip"])
    target = ["--editable", ".[dev]"] if dev else ["."]
    print(f"[pip] installing {' '.join(target)}")
    subprocess.check_call([pip, "install", *target], cwd=ROOT)


def check_ffmpeg() -> bool:
    """The sticker command shells out to ffmpeg; everything else works without it."""
    found = shutil.which("ffmpeg")
    if found:
        print(f"[ffmpeg] {found}")
    else:
        print("[ffmpeg] not on PATH - .sticker will reply with an error until it is installed")
        print("         termux: pkg install ffmpeg | debian: apt install ffmpeg | macOS: brew install ffmpeg")
    return found is not None


def prepare_data_dirs() -> None:
    for sub in DATA_SUBDIRS:
        os.makedirs(os.path.join(ROOT, "data", sub), exist_ok=True)
    print(f"[data] {', '.join('data/' + s for s in DATA_SUBDIRS)}")


def copy_templates() -> None:
    for template, target in TEMPLATES.items():
        source = os.path.join(ROOT, template)
        dest = os.path.join(ROOT, target)
        if os.path.exists(dest):
            print(f"[config] keeping existing {target}")
        elif os.path.exists(source):
            shutil.copy(source, dest)
            print(f"[config] wrote {target} from {template}")


def print_next_steps() -> None:
    activate = r".venv\Scripts\activate" if platform.system() == "Windows" else "source .venv/bin/activate"
    print(
        "\nDone. Next:\n"
        "  - put OWNER_NUMBER and OPENAI_API_KEY in .env\n"
        "  - run the Baileys bridge and scan its QR code\n"
        f"  - {activate}\n"
        "  - python -m wabot config-check\n"
        "  - python -m wabot\n"
    )


def main() -> None:
    require_python()
    install_package(dev="--dev" in sys.argv[1:])
    check_ffmpeg()
    prepare_data_dirs()
    copy_templates()
    print_next_steps()


if __name__ == "__main__":
    main()
