#!/usr/bin/env python3
"""
Session state for the file manager.

A session holds the user name and the current directory cursor. The cursor
always points at an existing directory on the real filesystem; it only moves
after the target has been checked.
"""

import os
import logging
from dataclasses import dataclass, field

from .errors import ResolutionError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    Current directory cursor plus session identity.

    Owned by the command executor and mutated only through change_directory,
    go_up and revalidate.
    """
    username: str = ''
    current_directory: str = field(default_factory=lambda: os.path.expanduser('~'))

    def __post_init__(self):
        self.current_directory = os.path.abspath(self.current_directory)
        if not os.path.isdir(self.current_directory):
            raise ResolutionError(f"directory not found: {self.current_directory}")

    def resolve(self, path: str) -> str:
        """Resolve a relative or absolute path against the cursor."""
        path = os.path.expanduser(path)
        return os.path.normpath(os.path.join(self.current_directory, path))

    def change_directory(self, target: str) -> str:
        """Move the cursor to target if it is an existing directory."""
        new_path = self.resolve(target)

        if not os.path.isdir(new_path):
            raise ResolutionError("directory not found")

        self.current_directory = new_path
        logger.debug("cursor moved to %s", new_path)
        return new_path

    def go_up(self) -> str:
        """Move the cursor to its parent directory."""
        parent = os.path.dirname(self.current_directory)

        if parent == self.current_directory or not os.path.isdir(parent):
            raise ResolutionError("already in root directory")

        self.current_directory = parent
        logger.debug("cursor moved up to %s", parent)
        return parent

    def revalidate(self) -> str:
        """
        Make sure the cursor still denotes a directory.

        A directory can be moved or removed from under the session (by mv,
        or by another process). In that case the cursor climbs to the closest
        ancestor that still exists.
        """
        path = self.current_directory
        while not os.path.isdir(path):
            parent = os.path.dirname(path)
            if parent == path:
                break
            path = parent

        if path != self.current_directory:
            logger.warning("current directory %s disappeared, moved to %s",
                           self.current_directory, path)
            self.current_directory = path
        return path
