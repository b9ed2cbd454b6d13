"""Unit tests for SDK download target computation."""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from provisioner.core.avd_descriptor import AVDDescriptor
from provisioner.core.sdk_targets import get_android_sdk_targets, get_sys_img_target


def test_sys_img_target_default_platform():
    assert get_sys_img_target("x86", "DEFAULT", "24") == "sys-img-x86-android-24"
    assert get_sys_img_target("x86", "default", "24") == "sys-img-x86-android-24"


def test_sys_img_target_named_platform():
    assert get_sys_img_target("armeabi-v7a", "google_apis", "23") == "sys-img-armeabi-v7a-google_apis-23"


def test_single_configuration():
    targets = get_android_sdk_targets(["24"], ["x86"], ["default"], [])

    assert targets == ["android-24", "sys-img-x86-android-24"]


def test_cartesian_product_order():
    targets = get_android_sdk_targets(["23", "24"], ["x86", "armeabi-v7a"], ["default", "google_apis"])

    assert targets == [
        "android-23",
        "android-24",
        "sys-img-x86-android-23",
        "sys-img-x86-android-24",
        "sys-img-x86-google_apis-23",
        "sys-img-x86-google_apis-24",
        "sys-img-armeabi-v7a-android-23",
        "sys-img-armeabi-v7a-android-24",
        "sys-img-armeabi-v7a-google_apis-23",
        "sys-img-armeabi-v7a-google_apis-24",
    ]


def test_old_avd_with_other_api_level_is_added_once():
    old_avd = AVDDescriptor("android-23", "default", "x86")

    targets = get_android_sdk_targets(["24"], ["x86"], ["default"], [old_avd, old_avd])

    assert targets == ["android-24", "sys-img-x86-android-24", "android-23", "sys-img-x86-android-23"]
    assert len(targets) == len(set(targets))


def test_old_avd_already_requested_adds_nothing():
    old_avd = AVDDescriptor.from_name("android-24-default-x86")

    targets = get_android_sdk_targets(["24"], ["x86"], ["default"], [old_avd])

    assert targets == ["android-24", "sys-img-x86-android-24"]


def test_repeated_requests_are_deduplicated():
    targets = get_android_sdk_targets(["24", "24"], ["x86"], ["default", "DEFAULT"])

    assert targets == ["android-24", "sys-img-x86-android-24"]
