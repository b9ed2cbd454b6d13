import logging
from typing import Iterable, List

from provisioner.config import PLATFORM_TARGET_PREFIX
from provisioner.core.avd_descriptor import AVDDescriptor, PlatformKind

logger = logging.getLogger(__name__)

# `update sdk` spells the default platform of a system image as "android"
DEFAULT_SYS_IMG_PLATFORM = "android"


def get_platform_target(level: str) -> str:
    """SDK platform package for an API level, e.g. "android-24"."""
    return f"{PLATFORM_TARGET_PREFIX}-{level}"


def get_sys_img_target(architecture: str, platform: str, level: str) -> str:
    """
    System image package for one configuration.

    Examples:
        ("x86", "default", "24") -> "sys-img-x86-android-24"
        ("armeabi-v7a", "google_apis", "23") -> "sys-img-armeabi-v7a-google_apis-23"
    """
    if PlatformKind.of(platform) is PlatformKind.DEFAULT:
        platform = DEFAULT_SYS_IMG_PLATFORM
    return f"sys-img-{architecture}-{platform}-{level}"


def get_android_sdk_targets(
    api_levels: Iterable[str],
    architectures: Iterable[str],
    platforms: Iterable[str],
    old_avds: Iterable[AVDDescriptor] = (),
) -> List[str]:
    """
    Get every SDK download target for the requested configurations.

    Virtual devices from earlier runs may use API levels or platforms that were not
    requested this time. Their targets are appended so they stay installable.

    Args:
        api_levels: API levels to download platforms for, e.g. ["24"]
        architectures: CPU architectures, e.g. ["x86", "armeabi-v7a"]
        platforms: System image platforms, e.g. ["default", "google_apis"]
        old_avds: Descriptors of previously created virtual devices

    Returns:
        List[str]: Targets in first-seen order, without duplicates
    """
    api_levels = list(api_levels)
    platforms = list(platforms)

    targets = [get_platform_target(level) for level in api_levels]
    for architecture in architectures:
        for platform in platforms:
            for level in api_levels:
                targets.append(get_sys_img_target(architecture, platform, level))

    for avd in old_avds:
        for target in (avd.api, get_sys_img_target(avd.architecture, avd.platform, avd.api_level)):
            if target not in targets:
                logger.debug(f"Adding {target} for previously created AVD {avd.name}")
                targets.append(target)

    # Requests themselves may repeat a level, architecture or platform
    return list(dict.fromkeys(targets))
