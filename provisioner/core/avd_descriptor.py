import re
from dataclasses import dataclass
from enum import Enum

# Suffix of a two-part ARM architecture, e.g. the "v7a" in "armeabi-v7a"
ARCH_VARIANT_PATTERN = re.compile(r"v[0-9]+[a-z]+")


class PlatformKind(Enum):
    """
    Whether a system image targets a specific platform (google_apis, android-wear, ...)
    or the stock "default" one. The literal platform string is only compared at this
    boundary; everything else asks for the kind.
    """

    DEFAULT = "default"
    NAMED = "named"

    @classmethod
    def of(cls, platform: str) -> "PlatformKind":
        return cls.DEFAULT if platform.upper() == "DEFAULT" else cls.NAMED


@dataclass(frozen=True)
class AVDDescriptor:
    """
    Everything we need to know about one Android Virtual Device.

    The canonical name is "<api>-<platform>-<architecture>", which is also the path of
    the system image under <sdk>/system-images/ with hyphens for separators, e.g.
    "android-24-default-x86" or "android-23-google_apis-armeabi-v7a".
    """

    api: str
    platform: str
    architecture: str

    @classmethod
    def from_name(cls, name: str) -> "AVDDescriptor":
        """
        Decode a canonical AVD name back into its components.

        The API is always the first two tokens. The architecture is the last token, or
        the last two when they look like "arm...-v<digits><letters>". The platform is
        whatever remains in between, so platforms may contain hyphens themselves.

        Raises:
            ValueError: If the name has too few tokens to hold all three components
        """
        parts = name.split("-")
        if len(parts) < 4:
            raise ValueError(f"Malformed AVD name {name!r}: expected <api>-<platform>-<architecture>")

        api = f"{parts[0]}-{parts[1]}"
        if ARCH_VARIANT_PATTERN.search(parts[-1]) and parts[-2][:3] == "arm":
            architecture = f"{parts[-2]}-{parts[-1]}"
        else:
            architecture = parts[-1]

        platform = name[len(api) + 1 : -(len(architecture) + 1)]
        if not platform:
            raise ValueError(f"Malformed AVD name {name!r}: missing platform")
        return cls(api, platform, architecture)

    @property
    def platform_kind(self) -> PlatformKind:
        return PlatformKind.of(self.platform)

    @property
    def api_level(self) -> str:
        """The API with its "android-" prefix removed, e.g. "24"."""
        prefix, _, level = self.api.partition("-")
        return level if prefix == "android" else self.api

    @property
    def abi(self) -> str:
        """ABI string for `create avd --abi`: the bare architecture for default images."""
        if self.platform_kind is PlatformKind.DEFAULT:
            return self.architecture
        return f"{self.platform}/{self.architecture}"

    @property
    def name(self) -> str:
        return "-".join([self.api, self.platform, self.architecture])

    def avd_name(self, version: str) -> str:
        """Name the AVD is installed under, e.g. "android-24-default-x86-v1-wd-manager"."""
        return f"{self.name}-v{version}-wd-manager"

    def __str__(self):
        return self.name
