import asyncio
import logging
import os
from typing import Dict, List, Mapping

from provisioner.config import HARDWARE_SETTINGS
from provisioner.core.avd_descriptor import AVDDescriptor
from provisioner.utils.android_path_utils import get_hardware_ini_path

logger = logging.getLogger(__name__)


def parse_ini(content: str) -> Dict[str, str]:
    """
    Parse the flat key=value format of hardware.ini and AVD config.ini files.

    Blank lines and comments (# or ;) are ignored; later keys win.
    """
    config = {}
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped[0] in "#;" or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        config[key.strip()] = value.strip()
    return config


def update_ini_lines(lines: List[str], settings: Mapping[str, str]) -> List[str]:
    """
    Set keys in the lines of a key=value file.

    Existing keys are rewritten in place, missing ones are appended, and every other line
    (comments included) is kept as is.
    """
    remaining = dict(settings)
    new_lines = []

    for line in lines:
        if "=" in line and not line.lstrip().startswith(("#", ";")):
            key = line.split("=", 1)[0].strip()
            if key in settings:
                # Drop duplicates of a key we already rewrote
                if key in remaining:
                    new_lines.append(f"{key}={remaining.pop(key)}\n")
                continue
        new_lines.append(line if line.endswith("\n") else line + "\n")

    for key, value in remaining.items():
        new_lines.append(f"{key}={value}\n")

    return new_lines


def configure_hardware_ini(config_path: str, settings: Mapping[str, str] = HARDWARE_SETTINGS) -> Dict[str, str]:
    """
    Force settings into a hardware.ini file, creating the file if needed.

    Args:
        config_path: Path to the hardware.ini file
        settings: Keys to set

    Returns:
        dict: The resulting configuration
    """
    lines = []
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            lines = f.readlines()
    else:
        logger.debug(f"No hardware.ini at {config_path}, starting from an empty configuration")

    new_lines = update_ini_lines(lines, settings)

    with open(config_path, "w") as f:
        f.writelines(new_lines)

    return parse_ini("".join(new_lines))


async def configure_avd_hardware(sdk_path: str, descriptor: AVDDescriptor) -> None:
    """Configure the hardware.ini of the system image a new AVD will be built from."""
    config_path = get_hardware_ini_path(sdk_path, descriptor.api, descriptor.platform, descriptor.architecture)
    await asyncio.to_thread(configure_hardware_ini, config_path)
    logger.debug(f"Updated hardware configuration for {descriptor.name} at {config_path}")
