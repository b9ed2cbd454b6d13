"""
Provisioning tool for emulated test devices.

Downloads Android SDK packages, enables hardware acceleration and creates one AVD per
installed system image, or checks that this machine can simulate iOS devices.

Usage:
    provision-avds android --api-levels 24,25 --architectures x86 --accept-licenses
    provision-avds ios
"""

import argparse
import logging

from provisioner.config import (
    DEFAULT_API_LEVELS,
    DEFAULT_ARCHITECTURES,
    DEFAULT_AVD_VERSION,
    DEFAULT_PLATFORMS,
)
from provisioner.core.avd_creator import android, read_avd_manifest
from provisioner.core.ios_environment import ios
from provisioner.logging_config import setup_logger, setup_sentry
from provisioner.utils.android_path_utils import get_android_home

logger = logging.getLogger(__name__)


def comma_list(value):
    """Parse "a,b,c" into ["a", "b", "c"]."""
    return [item.strip() for item in value.split(",") if item.strip()]


def build_parser():
    parser = argparse.ArgumentParser(description="Provision emulated mobile test devices")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output on the console")
    subparsers = parser.add_subparsers(dest="command", required=True)

    android_parser = subparsers.add_parser("android", help="Download the Android SDK packages and create AVDs")
    android_parser.add_argument("--sdk", default=get_android_home(), help="Android SDK root")
    android_parser.add_argument(
        "--api-levels", type=comma_list, default=DEFAULT_API_LEVELS, help="Comma separated API levels"
    )
    android_parser.add_argument(
        "--architectures",
        type=comma_list,
        default=DEFAULT_ARCHITECTURES,
        help="Comma separated CPU architectures",
    )
    android_parser.add_argument(
        "--platforms",
        type=comma_list,
        default=DEFAULT_PLATFORMS,
        help="Comma separated system image platforms (use 'default' for stock images)",
    )
    android_parser.add_argument(
        "--accept-licenses", action="store_true", help="Automatically accept every SDK license"
    )
    android_parser.add_argument(
        "--avd-version", default=DEFAULT_AVD_VERSION, help="Version tag included in every AVD name"
    )

    subparsers.add_parser("ios", help="Check that iOS devices can be simulated")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logger(console_level=logging.DEBUG if args.verbose else logging.INFO)
    setup_sentry()

    try:
        if args.command == "android":
            android(
                args.sdk,
                args.api_levels,
                args.architectures,
                args.platforms,
                args.accept_licenses,
                args.avd_version,
                read_avd_manifest(args.sdk),
                logger,
            )
        else:
            ios(logger)
    except Exception:
        logger.exception(f"Provisioning {args.command} failed")
        return 1
    return 0
