import asyncio
import json
import logging
import os
import platform
from typing import Iterable, List, Optional

from provisioner.config import (
    BUILD_TOOLS_TARGET,
    CORE_TOOL_TARGETS,
    HAXM_HOST_SYSTEMS,
    HAXM_TARGET,
)
from provisioner.core.avd_descriptor import AVDDescriptor
from provisioner.core.device_discovery import get_avd_descriptors
from provisioner.core.hardware_config import configure_avd_hardware
from provisioner.core.sdk_command import (
    ProcessExitError,
    ProcessSpawnError,
    StdioMode,
    hardware_profile_responder,
    license_responder,
    run_sdk_command,
)
from provisioner.core.sdk_targets import get_android_sdk_targets
from provisioner.core.sequential import sequential_for_each
from provisioner.utils.android_path_utils import (
    get_avd_manifest_path,
    get_haxm_installer_path,
)

logger = logging.getLogger(__name__)


class AVDCreator:
    """
    Downloads Android SDK packages and (re)creates one AVD per installed system image.

    Every step waits for the previous one, and any failure aborts the rest of the run.
    """

    def __init__(self, sdk_path: str, log: Optional[logging.Logger] = None, host_system: Optional[str] = None):
        self.sdk_path = sdk_path
        self.log = log or logger
        self.host_system = host_system or platform.system()

    @property
    def needs_haxm(self) -> bool:
        return self.host_system in HAXM_HOST_SYSTEMS

    async def download_android_updates(self, targets: List[str], search_all: bool, auto_accept: bool) -> None:
        """
        Download SDK packages with `android update sdk`.

        Args:
            targets: SDK targets, e.g. ["android-24", "sys-img-x86-android-24"]
            search_all: Also search obsolete and third party packages (-a)
            auto_accept: Answer "y" to every license prompt instead of asking the operator
        """
        args = ["sdk", "-u"] + (["-a"] if search_all else []) + ["-t", ",".join(targets)]
        if auto_accept:
            await run_sdk_command(self.sdk_path, "update", args, StdioMode.PIPE, license_responder())
        else:
            await run_sdk_command(self.sdk_path, "update", args, StdioMode.INHERIT)

    async def setup_hardware_acceleration(self) -> Optional[int]:
        """
        Run Intel's HAXM silent installer on macOS and Windows.

        The installer's result is only logged: a failed install does not stop the run.

        Returns:
            Optional[int]: The installer's exit code, or None if it was not run
        """
        # TODO: check that the BIOS virtualization option is enabled on Linux hosts
        if self.host_system == "Darwin":
            self.log.info("android-sdk: Enabling hardware acceleration (requires root access)")
            argv = ["sudo", get_haxm_installer_path(self.sdk_path, "silent_install.sh")]
        elif self.host_system == "Windows":
            self.log.info("android-sdk: Enabling hardware acceleration (requires admin access)")
            argv = [
                "cmd",
                "/c",
                "runas",
                "/noprofile",
                "/user:Administrator",
                get_haxm_installer_path(self.sdk_path, "silent_install.bat"),
            ]
        else:
            return None

        try:
            process = await asyncio.create_subprocess_exec(*argv)
            exit_code = await process.wait()
        except OSError as e:
            self.log.warning(f"android-sdk: Could not run the hardware acceleration installer: {e}")
            return None

        if exit_code != 0:
            self.log.warning(f"android-sdk: Hardware acceleration installer exited with code {exit_code}")
        return exit_code

    async def delete_avd_if_exists(self, avd_name: str) -> bool:
        """
        Delete an AVD, treating any failure as "there was nothing to delete".

        Returns:
            bool: True if an AVD was deleted
        """
        try:
            await run_sdk_command(self.sdk_path, "delete", ["avd", "--name", avd_name])
        except (ProcessExitError, ProcessSpawnError) as e:
            self.log.debug(f"No AVD {avd_name} deleted: {e}")
            return False
        return True

    async def make_avd(self, descriptor: AVDDescriptor, version: str) -> None:
        """Replace any existing AVD for this descriptor with a fresh one."""
        avd_name = descriptor.avd_name(version)
        await self.delete_avd_if_exists(avd_name)
        await run_sdk_command(
            self.sdk_path,
            "create",
            ["avd", "--name", avd_name, "--target", descriptor.api, "--abi", descriptor.abi],
            StdioMode.PIPE,
            hardware_profile_responder(),
        )

    def write_avd_manifest(self, descriptors: Iterable[AVDDescriptor]) -> str:
        manifest_path = get_avd_manifest_path(self.sdk_path)
        with open(manifest_path, "w") as f:
            json.dump([descriptor.name for descriptor in descriptors], f)
        return manifest_path

    async def initialize(
        self,
        api_levels: List[str],
        architectures: List[str],
        platforms: List[str],
        accept_licenses: bool,
        version: str,
        old_avds: Iterable[str] = (),
    ) -> List[AVDDescriptor]:
        """
        Download everything the requested AVDs need, then create one AVD per system image.

        Args:
            api_levels: API levels, e.g. ["24"]
            architectures: CPU architectures, e.g. ["x86"]
            platforms: System image platforms, e.g. ["default", "google_apis"]
            accept_licenses: Automatically accept SDK licenses
            version: Version tag put into every AVD name
            old_avds: Names of AVDs made by earlier runs, kept installable

        Returns:
            List[AVDDescriptor]: The AVDs that were created, as written to the manifest
        """
        # Malformed names must fail before anything is downloaded or installed
        old_descriptors = [AVDDescriptor.from_name(name) for name in old_avds]

        tools = list(CORE_TOOL_TARGETS)
        if self.needs_haxm:
            tools.append(HAXM_TARGET)

        self.log.info("android-sdk: Downloading additional SDK updates")
        await self.download_android_updates(tools, False, accept_licenses)

        await self.setup_hardware_acceleration()

        self.log.info("android-sdk: Downloading more additional SDK updates (this may take a while)")
        targets = [BUILD_TOOLS_TARGET] + get_android_sdk_targets(
            api_levels, architectures, platforms, old_descriptors
        )
        await self.download_android_updates(targets, True, accept_licenses)

        self.log.info("android-sdk: Looking for installed system images")
        descriptors = await get_avd_descriptors(self.sdk_path)

        self.log.info("android-sdk: Configuring virtual device hardware")
        await sequential_for_each(descriptors, lambda descriptor: configure_avd_hardware(self.sdk_path, descriptor))

        async def set_up_avd(descriptor: AVDDescriptor) -> None:
            self.log.info(f'android-sdk: Setting up virtual device "{descriptor.name}"')
            await self.make_avd(descriptor, version)

        await sequential_for_each(descriptors, set_up_avd)

        self.log.info("android-sdk: Saving the list of available virtual devices")
        await asyncio.to_thread(self.write_avd_manifest, descriptors)

        self.log.info("android-sdk: Initialization complete")
        return descriptors


def read_avd_manifest(sdk_path: str) -> List[str]:
    """Names of the AVDs created by the last run, or [] if there has been none."""
    manifest_path = get_avd_manifest_path(sdk_path)
    if not os.path.exists(manifest_path):
        return []
    with open(manifest_path, "r") as f:
        return json.load(f)


def android(
    sdk_path: str,
    api_levels: List[str],
    architectures: List[str],
    platforms: List[str],
    accept_licenses: bool,
    version: str,
    old_avds: Iterable[str],
    log: Optional[logging.Logger] = None,
) -> List[AVDDescriptor]:
    """Initialize the Android SDK and its virtual devices. Blocks until done."""
    creator = AVDCreator(sdk_path, log)
    return asyncio.run(
        creator.initialize(api_levels, architectures, platforms, accept_licenses, version, old_avds)
    )
