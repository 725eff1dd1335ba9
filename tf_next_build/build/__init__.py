"""Build orchestration module.

This module handles:
- Enumerating the source files handed to the build
- Acquiring and releasing the build workspace
- Invoking the external build and reading its build ID
- Driving the build command from workspace to config.json
"""

from tf_next_build.build.service import (
    BuildFailure,
    BuildSuccess,
    build_command,
    run_build_command,
)

__all__ = ["BuildFailure", "BuildSuccess", "build_command", "run_build_command"]
