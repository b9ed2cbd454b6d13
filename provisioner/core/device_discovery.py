import asyncio
import glob
import logging
import os
from typing import List

from provisioner.core.avd_descriptor import AVDDescriptor
from provisioner.utils.android_path_utils import get_system_images_dir

logger = logging.getLogger(__name__)


def find_installed_system_images(sdk_path: str) -> List[AVDDescriptor]:
    """
    Describe every AVD that can be made from the system images currently installed.

    System images live at <sdk>/system-images/<api>/<platform>/<architecture>/.
    """
    pattern = os.path.join(get_system_images_dir(sdk_path), "*", "*", "*")

    descriptors = []
    for path in sorted(glob.glob(pattern)):
        if not os.path.isdir(path):
            continue
        api, platform, architecture = os.path.normpath(path).split(os.sep)[-3:]
        descriptors.append(AVDDescriptor(api, platform, architecture))

    logger.info(f"Found {len(descriptors)} installed system images: {', '.join(d.name for d in descriptors)}")
    return descriptors


async def get_avd_descriptors(sdk_path: str) -> List[AVDDescriptor]:
    return await asyncio.to_thread(find_installed_system_images, sdk_path)
