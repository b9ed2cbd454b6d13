"""Tests for the end-to-end Android provisioning flow."""

import asyncio
import json
import logging
import stat
import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from provisioner.core import avd_creator
from provisioner.core.avd_creator import AVDCreator, android, read_avd_manifest
from provisioner.core.avd_descriptor import AVDDescriptor
from provisioner.core.hardware_config import parse_ini
from provisioner.core.sdk_command import ProcessExitError, StdioMode

# Stand-in for <sdk>/tools/android: records its arguments, "installs" the x86 image for
# API 24 when asked for it, knows no AVDs to delete and insists on the hardware profile
# question being answered with "no".
FAKE_SDK_TOOL = """#!/bin/sh
sdk_dir="$(cd "$(dirname "$0")/.." && pwd)"
echo "$@" >> "$sdk_dir/calls.log"
case "$1" in
    update)
        case "$*" in
            *sys-img-x86-android-24*) mkdir -p "$sdk_dir/system-images/android-24/default/x86" ;;
        esac
        ;;
    delete)
        echo "Error: There is no Android Virtual Device named '$4'."
        exit 1
        ;;
    create)
        printf "Android 7.0 is a basic Android platform.\\nDo you wish to create a custom hardware profile [no]"
        read answer
        if [ "$answer" != "no" ]; then
            exit 4
        fi
        mkdir -p "$sdk_dir/avd/$4.avd"
        ;;
esac
exit 0
"""


@pytest.fixture
def sdk_dir(tmp_path, monkeypatch):
    # No HAXM download or installer, whatever the machine running the tests
    monkeypatch.setattr(avd_creator.platform, "system", lambda: "Linux")

    tools_dir = tmp_path / "tools"
    tools_dir.mkdir()
    tool = tools_dir / "android"
    tool.write_text(FAKE_SDK_TOOL)
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return tmp_path


class FakeSDK:
    """Records SDK commands instead of running them."""

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on or (lambda cmd, args: None)

    async def __call__(self, sdk_path, cmd, args, stdio=StdioMode.INHERIT, responder=None):
        self.calls.append((cmd, list(args), stdio, responder.question if responder else None))
        exit_code = self.fail_on(cmd, args)
        if exit_code:
            raise ProcessExitError([cmd] + list(args), exit_code)


@pytest.mark.skipif(sys.platform == "win32", reason="fake SDK tool is a POSIX shell script")
class TestAndroidEndToEnd:
    def test_provisions_default_x86_device(self, sdk_dir):
        descriptors = android(str(sdk_dir), ["24"], ["x86"], ["default"], False, "1", [], logging.getLogger("test"))

        assert [d.name for d in descriptors] == ["android-24-default-x86"]
        assert descriptors[0].abi == "x86"

        hardware_ini = sdk_dir / "system-images" / "android-24" / "default" / "x86" / "hardware.ini"
        assert parse_ini(hardware_ini.read_text()) == {
            "hw.keyboard": "yes",
            "hw.battery": "yes",
            "hw.ramSize": "1024",
        }

        assert (sdk_dir / "avd" / "android-24-default-x86-v1-wd-manager.avd").is_dir()
        assert json.loads((sdk_dir / "available_avds.json").read_text()) == ["android-24-default-x86"]

        calls = (sdk_dir / "calls.log").read_text().splitlines()
        assert calls[1] == "update sdk -u -a -t build-tools-24.0.0,android-24,sys-img-x86-android-24"
        assert calls[2:] == [
            "delete avd --name android-24-default-x86-v1-wd-manager",
            "create avd --name android-24-default-x86-v1-wd-manager --target android-24 --abi x86",
        ]

    def test_manifest_round_trip(self, sdk_dir):
        android(str(sdk_dir), ["24"], ["x86"], ["default"], True, "2", [])

        assert read_avd_manifest(str(sdk_dir)) == ["android-24-default-x86"]


class TestAVDCreator:
    def test_stage_order_and_commands(self, tmp_path, monkeypatch):
        image_dir = tmp_path / "system-images" / "android-24" / "default" / "x86"
        image_dir.mkdir(parents=True)
        fake_sdk = FakeSDK()
        monkeypatch.setattr(avd_creator, "run_sdk_command", fake_sdk)

        creator = AVDCreator(str(tmp_path), host_system="Linux")
        asyncio.run(creator.initialize(["24"], ["x86"], ["default"], True, "1", ["android-23-google_apis-x86"]))

        assert fake_sdk.calls == [
            ("update", ["sdk", "-u", "-t", "platform-tool,tool"], StdioMode.PIPE, "Do you accept the license"),
            (
                "update",
                [
                    "sdk",
                    "-u",
                    "-a",
                    "-t",
                    "build-tools-24.0.0,android-24,sys-img-x86-android-24,android-23,sys-img-x86-google_apis-23",
                ],
                StdioMode.PIPE,
                "Do you accept the license",
            ),
            ("delete", ["avd", "--name", "android-24-default-x86-v1-wd-manager"], StdioMode.INHERIT, None),
            (
                "create",
                ["avd", "--name", "android-24-default-x86-v1-wd-manager", "--target", "android-24", "--abi", "x86"],
                StdioMode.PIPE,
                "Do you wish to create a custom hardware profile",
            ),
        ]

    def test_haxm_download_on_mac(self, tmp_path, monkeypatch):
        fake_sdk = FakeSDK()
        monkeypatch.setattr(avd_creator, "run_sdk_command", fake_sdk)
        installer_calls = []

        async def fake_installer(self):
            installer_calls.append(self.host_system)

        monkeypatch.setattr(AVDCreator, "setup_hardware_acceleration", fake_installer)

        creator = AVDCreator(str(tmp_path), host_system="Darwin")
        asyncio.run(creator.initialize(["24"], ["x86"], ["default"], False, "1"))

        first_targets = fake_sdk.calls[0][1][-1]
        assert first_targets == "platform-tool,tool,extra-intel-Hardware_Accelerated_Execution_Manager"
        assert fake_sdk.calls[0][2] is StdioMode.INHERIT
        assert installer_calls == ["Darwin"]

    def test_hardware_acceleration_is_skipped_on_linux(self, tmp_path):
        creator = AVDCreator(str(tmp_path), host_system="Linux")

        assert asyncio.run(creator.setup_hardware_acceleration()) is None

    def test_missing_haxm_installer_does_not_fail(self, tmp_path, monkeypatch):
        async def missing_executable(*argv, **kwargs):
            raise FileNotFoundError(argv[0])

        monkeypatch.setattr(avd_creator.asyncio, "create_subprocess_exec", missing_executable)
        creator = AVDCreator(str(tmp_path), host_system="Darwin")

        assert asyncio.run(creator.setup_hardware_acceleration()) is None

    def test_failed_haxm_installer_is_only_logged(self, tmp_path, monkeypatch, caplog):
        class FailedProcess:
            async def wait(self):
                return 1

        async def failing_installer(*argv, **kwargs):
            return FailedProcess()

        monkeypatch.setattr(avd_creator.asyncio, "create_subprocess_exec", failing_installer)
        creator = AVDCreator(str(tmp_path), host_system="Windows")

        with caplog.at_level(logging.WARNING):
            assert asyncio.run(creator.setup_hardware_acceleration()) == 1

        assert "exited with code 1" in caplog.text

    def test_download_failure_aborts_run(self, tmp_path, monkeypatch):
        fake_sdk = FakeSDK(fail_on=lambda cmd, args: 3 if cmd == "update" else None)
        monkeypatch.setattr(avd_creator, "run_sdk_command", fake_sdk)

        creator = AVDCreator(str(tmp_path), host_system="Linux")
        with pytest.raises(ProcessExitError) as excinfo:
            asyncio.run(creator.initialize(["24"], ["x86"], ["default"], False, "1"))

        assert excinfo.value.exit_code == 3
        assert len(fake_sdk.calls) == 1
        assert not (tmp_path / "available_avds.json").exists()

    def test_create_failure_stops_remaining_devices(self, tmp_path, monkeypatch):
        for arch in ("armeabi-v7a", "x86"):
            (tmp_path / "system-images" / "android-24" / "default" / arch).mkdir(parents=True)
        fake_sdk = FakeSDK(fail_on=lambda cmd, args: 2 if cmd == "create" else None)
        monkeypatch.setattr(avd_creator, "run_sdk_command", fake_sdk)

        creator = AVDCreator(str(tmp_path), host_system="Linux")
        with pytest.raises(ProcessExitError):
            asyncio.run(creator.initialize(["24"], ["x86"], ["default"], False, "1"))

        created = [args[2] for cmd, args, _, _ in fake_sdk.calls if cmd == "create"]
        assert created == ["android-24-default-armeabi-v7a-v1-wd-manager"]
        assert not (tmp_path / "available_avds.json").exists()

    def test_delete_failure_is_ignored(self, tmp_path, monkeypatch):
        fake_sdk = FakeSDK(fail_on=lambda cmd, args: 1 if cmd == "delete" else None)
        monkeypatch.setattr(avd_creator, "run_sdk_command", fake_sdk)
        creator = AVDCreator(str(tmp_path))

        asyncio.run(creator.make_avd(AVDDescriptor("android-23", "google_apis", "armeabi-v7a"), "3"))

        assert [call[0] for call in fake_sdk.calls] == ["delete", "create"]
        assert fake_sdk.calls[1][1][-1] == "google_apis/armeabi-v7a"

    def test_delete_failure_goes_to_callers_logger(self, tmp_path, monkeypatch, caplog):
        fake_sdk = FakeSDK(fail_on=lambda cmd, args: 1 if cmd == "delete" else None)
        monkeypatch.setattr(avd_creator, "run_sdk_command", fake_sdk)
        creator = AVDCreator(str(tmp_path), log=logging.getLogger("caller"), host_system="Linux")

        with caplog.at_level(logging.DEBUG, logger="caller"):
            assert asyncio.run(creator.delete_avd_if_exists("android-24-default-x86-v1-wd-manager")) is False

        records = [record for record in caplog.records if "No AVD" in record.getMessage()]
        assert [record.name for record in records] == ["caller"]

    def test_malformed_old_avd_fails_before_any_side_effect(self, tmp_path, monkeypatch):
        fake_sdk = FakeSDK()
        monkeypatch.setattr(avd_creator, "run_sdk_command", fake_sdk)
        installer_calls = []

        async def fake_installer(self):
            installer_calls.append(self.host_system)

        monkeypatch.setattr(AVDCreator, "setup_hardware_acceleration", fake_installer)

        creator = AVDCreator(str(tmp_path), host_system="Darwin")
        with pytest.raises(ValueError):
            asyncio.run(creator.initialize(["24"], ["x86"], ["default"], True, "1", ["bogus"]))

        assert fake_sdk.calls == []
        assert installer_calls == []
        assert not (tmp_path / "available_avds.json").exists()

    def test_read_avd_manifest_without_previous_run(self, tmp_path):
        assert read_avd_manifest(str(tmp_path)) == []
