import logging
import os
import platform
from typing import Optional

from provisioner.config import XCODE_APP_PATH

logger = logging.getLogger(__name__)


class HostOSMismatchError(Exception):
    """Raised when a simulator is requested on a host that cannot run it."""


def ios(log: Optional[logging.Logger] = None, host_system: Optional[str] = None) -> None:
    """
    Check that this machine can simulate iOS devices.

    Raises:
        HostOSMismatchError: If not running on macOS
    """
    log = log or logger
    if (host_system or platform.system()) != "Darwin":
        raise HostOSMismatchError("Must be on a Mac to simulate iOS devices.")

    if not os.path.exists(XCODE_APP_PATH):
        log.warning("You must install the xcode commandline tools!")
