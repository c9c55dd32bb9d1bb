"""Discovery of installed command-line agents."""

import json
import subprocess
from collections.abc import Sequence

import structlog

from .config import DiscoveryConfig
from .launcher import build_command
from .resolver import find_on_path, get_version
from .signatures import DEFAULT_SIGNATURES, AgentSignature
from .types import DiscoveredAgent

logger = structlog.get_logger()


def scan_package_manager(
    signatures: Sequence[AgentSignature],
    timeout_seconds: float = 10.0,
) -> set[str]:
    """Find agents installed as global npm packages.

    Args:
        signatures: Catalog to match package names against.
        timeout_seconds: How long to let npm run.

    Returns:
        Commands of the signatures whose package is installed. Empty if
        npm is missing or its output cannot be read.
    """
    if find_on_path("npm") is None:
        logger.debug("package_manager_not_found", package_manager="npm")
        return set()

    try:
        # npm exits non-zero for mere warnings, so the exit code is ignored
        result = subprocess.run(
            build_command("npm", ["list", "-g", "--depth=0", "--json"]),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=timeout_seconds,
        )
        listing = json.loads(result.stdout or b"{}")
    except subprocess.TimeoutExpired:
        logger.warning("package_manager_timeout", timeout=timeout_seconds)
        return set()
    except (OSError, ValueError) as e:
        logger.debug("package_manager_scan_failed", error=str(e))
        return set()

    installed = listing.get("dependencies") if isinstance(listing, dict) else None
    if not isinstance(installed, dict):
        return set()

    return {sig.command for sig in signatures if sig.package and sig.package in installed}


def discover(
    signatures: Sequence[AgentSignature] | None = None,
    config: DiscoveryConfig | None = None,
) -> list[DiscoveredAgent]:
    """Discover which known agents are installed.

    Only agents whose command resolves on the search path are returned;
    a package-manager hit alone is not enough.

    Args:
        signatures: Catalog to scan for, defaults to the built-in one.
        config: Discovery settings.

    Returns:
        Installed agents in catalog order, one per command.
    """
    if signatures is None:
        signatures = DEFAULT_SIGNATURES
    if config is None:
        config = DiscoveryConfig()

    seen_via_package: set[str] = set()
    if config.scan_package_manager:
        seen_via_package = scan_package_manager(
            signatures,
            timeout_seconds=config.package_manager_timeout_seconds,
        )

    found: list[DiscoveredAgent] = []
    found_ids: set[str] = set()

    for sig in signatures:
        if sig.command in found_ids:
            continue

        path = find_on_path(sig.command)
        if path is None:
            if sig.command in seen_via_package:
                logger.info(
                    "agent_package_without_executable",
                    command=sig.command,
                    package=sig.package,
                )
            continue

        version = get_version(
            sig.command,
            flag=config.version_flag,
            timeout=config.version_timeout_seconds,
        )

        found.append(
            DiscoveredAgent(
                id=sig.command,
                name=sig.name,
                short_name=sig.short_name,
                command=sig.command,
                path=path,
                color=sig.color,
                version=version,
                available=True,
            )
        )
        found_ids.add(sig.command)

    logger.info(
        "agents_discovered",
        count=len(found),
        via_package_manager=len(seen_via_package),
    )
    return found
