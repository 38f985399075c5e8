"""
System interaction utilities.

This module provides:

- Command execution with proper error handling and logging
- Startup precondition checks (trace tool present, root privileges)
- Disk topology lookup used to enrich alert messages
"""

# Command execution
from .commands import (
    check_tool_installed,
    expand_command,
    has_root_privileges,
    run_command,
)

# Topology
from .topology import describe_instances, disk_info, resolve_disk_name

__all__ = [
    # Commands
    "check_tool_installed",
    "expand_command",
    "has_root_privileges",
    "run_command",
    # Topology
    "describe_instances",
    "disk_info",
    "resolve_disk_name",
]
