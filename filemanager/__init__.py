"""
File Manager - an interactive shell for navigating and managing files

This package provides a line-oriented prompt for browsing a real filesystem
tree from a current-directory cursor, plus file operations including
streaming hashing, compression and decompression.
"""

__version__ = "0.1.0"

from .session import Session

from .command_parser import (
    Command,
    CommandParser,
)

from .commands import (
    COMMANDS,
    CommandResult,
    CommandSpec,
    FileManager,
)

from .transfer import (
    TransferEngine,
    TransferJob,
    TransferResult,
    TransformKind,
    COMPRESSED_SUFFIX,
)

from .terminal import (
    TerminalSession,
    TerminalConfig,
    CommandExecutor,
    main,
)

from .errors import (
    FileManagerError,
    UsageError,
    ResolutionError,
    TransferError,
)

__all__ = [
    # Session state
    "Session",

    # Command parser
    "Command",
    "CommandParser",

    # Commands
    "COMMANDS",
    "CommandResult",
    "CommandSpec",
    "FileManager",

    # Streaming transfers
    "TransferEngine",
    "TransferJob",
    "TransferResult",
    "TransformKind",
    "COMPRESSED_SUFFIX",

    # Terminal
    "TerminalSession",
    "TerminalConfig",
    "CommandExecutor",
    "main",

    # Errors
    "FileManagerError",
    "UsageError",
    "ResolutionError",
    "TransferError",

    # Version info
    "__version__",
]
