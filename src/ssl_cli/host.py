import os
import sys
import logging
from typing import Callable, Optional
from .models import HostProfile, PackageManager, PACKAGE_MANAGER_PREFERENCE
from .commands import HostCommandBuilder
from .utils import CommandRunner, run_command, is_executable_available, is_wsl

logger = logging.getLogger(__name__)


def detect_package_manager(which: Callable[[str], bool] = is_executable_available) -> Optional[PackageManager]:
    for manager in PACKAGE_MANAGER_PREFERENCE:
        if which(manager.value):
            return manager
    return None


def detect_host_profile(runner: CommandRunner = run_command,
                        platform: Optional[str] = None,
                        which: Callable[[str], bool] = is_executable_available) -> HostProfile:
    """Probe the host on every run; nothing here is cached between invocations.

    Args:
        runner: Executes the privilege probe
        platform: Overrides ``sys.platform``
        which: Answers whether an executable is on PATH

    Returns:
        The resolved HostProfile; unsupported platforms are returned without
        further probing
    """
    platform = platform or sys.platform
    if not platform.startswith("linux"):
        return HostProfile(platform=platform)

    is_root = hasattr(os, "geteuid") and os.geteuid() == 0
    privileged = is_root or runner(HostCommandBuilder.build_privilege_probe_command()).success
    profile = HostProfile(
        platform=platform,
        is_wsl=is_wsl(),
        is_root=is_root,
        privileged=privileged,
        package_manager=detect_package_manager(which),
    )
    logger.debug("Host profile: %s", profile)
    return profile
