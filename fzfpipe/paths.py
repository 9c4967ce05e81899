"""
fzfpipe.paths — Resolve selection paths against the writer's cwd.

The wrapper reports the directory the finder ran in together with the
selection, so relative selections are joined onto that directory. A path
that no longer exists resolves to None and the caller does nothing.
"""

import os
from typing import Optional


def resolve_path(argument: str, cwd: str) -> Optional[str]:
    """
    Resolve a selection against a working directory.

    Args:
        argument: Path as printed by the finder (absolute or relative)
        cwd: Working directory the finder ran in

    Returns:
        The joined path if it exists on disk, else None.
    """
    if not os.path.isabs(argument):
        argument = os.path.join(cwd, argument)
    if os.path.exists(argument):
        return argument
    return None
