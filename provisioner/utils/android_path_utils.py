"""Utility functions for Android SDK path determination."""

import os

from provisioner.config import AVD_MANIFEST_FILE, DEFAULT_ANDROID_SDK, SDK_TOOL_BINARY


def get_android_home() -> str:
    """
    Get the Android SDK home directory based on environment.

    Returns:
        str: Path to Android SDK
    """
    return os.environ.get("ANDROID_HOME") or DEFAULT_ANDROID_SDK


def get_sdk_tool_path(sdk_path: str) -> str:
    """Path of the SDK command line tool that downloads packages and manages AVDs."""
    return os.path.join(sdk_path, "tools", SDK_TOOL_BINARY)


def get_system_images_dir(sdk_path: str) -> str:
    return os.path.join(sdk_path, "system-images")


def get_system_image_dir(sdk_path: str, api: str, platform_name: str, architecture: str) -> str:
    """
    Directory of one installed system image.

    Args:
        sdk_path: Android SDK root
        api: API identifier, e.g. "android-24"
        platform_name: Platform directory, e.g. "default" or "google_apis"
        architecture: CPU architecture, e.g. "x86" or "armeabi-v7a"

    Returns:
        str: <sdk>/system-images/<api>/<platform>/<architecture>
    """
    return os.path.join(get_system_images_dir(sdk_path), api, platform_name, architecture)


def get_hardware_ini_path(sdk_path: str, api: str, platform_name: str, architecture: str) -> str:
    return os.path.join(get_system_image_dir(sdk_path, api, platform_name, architecture), "hardware.ini")


def get_haxm_installer_path(sdk_path: str, script_name: str) -> str:
    """Path of an Intel HAXM silent installer script bundled with the SDK extras."""
    return os.path.join(sdk_path, "extras", "intel", "Hardware_Accelerated_Execution_Manager", script_name)


def get_avd_manifest_path(sdk_path: str) -> str:
    return os.path.join(sdk_path, AVD_MANIFEST_FILE)
