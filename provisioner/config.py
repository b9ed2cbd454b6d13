import os
import platform
from pathlib import Path

from dotenv import load_dotenv

# Paths
BASE_DIR = Path(__file__).resolve().parent.parent

ENVIRONMENT = os.getenv("ENVIRONMENT", "DEV")

# Load .env files before any setting below is read
if ENVIRONMENT.lower() == "prod":
    load_dotenv(os.path.join(BASE_DIR, ".env.prod"), override=True)
elif ENVIRONMENT.lower() == "staging":
    load_dotenv(os.path.join(BASE_DIR, ".env.staging"), override=True)
else:
    load_dotenv(os.path.join(BASE_DIR, ".env"), override=True)


def _env_list(name: str, default: str) -> list:
    """Read a comma separated environment variable into a list of non-empty strings."""
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


# Logging settings, relative to where the tool is run unless LOG_DIR is set
LOGS_DIR = os.getenv("LOG_DIR") or os.path.join(os.getcwd(), "logs")
LOG_FILE = os.path.join(LOGS_DIR, "provisioner.log")
LOG_TIMEZONE = os.getenv("LOG_TIMEZONE", "US/Pacific")

# Error reporting
SENTRY_DSN = os.getenv("SENTRY_DSN")

# Default Android SDK path
DEFAULT_ANDROID_SDK = "/opt/android-sdk"
# Alternative for macOS
if platform.system() == "Darwin":
    DEFAULT_ANDROID_SDK = os.path.expanduser("~/Library/Android/sdk")

# Virtual devices requested when the CLI is given no explicit lists
DEFAULT_API_LEVELS = _env_list("AVD_API_LEVELS", "24")
DEFAULT_ARCHITECTURES = _env_list("AVD_ARCHITECTURES", "x86")
DEFAULT_PLATFORMS = _env_list("AVD_PLATFORMS", "google_apis")
DEFAULT_AVD_VERSION = os.getenv("AVD_VERSION", "1")

# SDK command line tool, found under <sdk>/tools/
SDK_TOOL_BINARY = "android"

# Download targets
PLATFORM_TARGET_PREFIX = "android"
BUILD_TOOLS_TARGET = "build-tools-24.0.0"
CORE_TOOL_TARGETS = ["platform-tool", "tool"]
HAXM_TARGET = "extra-intel-Hardware_Accelerated_Execution_Manager"

# Host operating systems (platform.system()) which get Intel HAXM
HAXM_HOST_SYSTEMS = ("Darwin", "Windows")

# Written under the SDK root after every provisioning run
AVD_MANIFEST_FILE = "available_avds.json"

# Settings forced into every system image's hardware.ini
HARDWARE_SETTINGS = {
    "hw.keyboard": "yes",
    "hw.battery": "yes",
    "hw.ramSize": "1024",
}

# Interactive prompts printed by the SDK tool, and the answers we give
LICENSE_PROMPT = "Do you accept the license"
LICENSE_ANSWER = "y"
HARDWARE_PROFILE_PROMPT = "Do you wish to create a custom hardware profile"
HARDWARE_PROFILE_ANSWER = "no"

# iOS simulation requires Xcode
XCODE_APP_PATH = "/Applications/Xcode.app"
