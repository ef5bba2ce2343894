#!/usr/bin/env python3
"""
Command handlers for the file manager.

Each command is a method on FileManager returning a CommandResult. The
static COMMANDS table maps a command name to its handler and argument
contract; the executor checks the contract before a handler runs, so a
handler can rely on its required arguments being present.

Handlers raise UsageError, ResolutionError, TransferError or OSError on
failure. Turning those into a printed line is left to the executor.
"""

import os
import json
import shutil
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from . import platform_info
from .errors import ResolutionError, UsageError
from .session import Session
from .transfer import TransferEngine, compressed_name, decompressed_name

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """
    Result of a command.

    data holds the Python value (entries, digest, path...), text is what the
    terminal prints.
    """
    data: Any = None
    text: Optional[str] = None
    exit_code: int = 0

    def __str__(self) -> str:
        if self.text is not None:
            return self.text
        if isinstance(self.data, list):
            return '\n'.join(str(item) for item in self.data)
        return '' if self.data is None else str(self.data)


@dataclass(frozen=True)
class CommandSpec:
    """Argument contract of one command."""
    name: str
    handler: str
    usage: str
    summary: str
    required: int = 0
    missing: str = 'arguments'


COMMANDS: Dict[str, CommandSpec] = {spec.name: spec for spec in [
    CommandSpec('help', 'help', 'help [command]', 'Show available commands'),
    CommandSpec('ls', 'ls', 'ls', 'List files and directories'),
    CommandSpec('cd', 'cd', 'cd <directory>', 'Change directory',
                required=1, missing='directory argument'),
    CommandSpec('up', 'up', 'up', 'Go to parent directory'),
    CommandSpec('cat', 'cat', 'cat <filename>', 'Display file content',
                required=1, missing='filename argument'),
    CommandSpec('add', 'add', 'add <filename>', 'Create empty file',
                required=1, missing='filename argument'),
    CommandSpec('rn', 'rn', 'rn <path_to_file> <new_filename>', 'Rename file',
                required=2),
    CommandSpec('cp', 'cp', 'cp <path_to_file> <path_to_new_directory>', 'Copy file',
                required=2),
    CommandSpec('mv', 'mv', 'mv <path_to_file> <path_to_new_directory>', 'Move file',
                required=2),
    CommandSpec('rm', 'rm', 'rm <path_to_file>', 'Delete file',
                required=1, missing='filename argument'),
    CommandSpec('os', 'os_info', 'os --eol|--cpus|--homedir|--username|--architecture',
                'Get operating system information',
                required=1, missing='option argument'),
    CommandSpec('hash', 'hash', 'hash <path_to_file>', 'Calculate hash for file',
                required=1, missing='filename argument'),
    CommandSpec('compress', 'compress', 'compress <path_to_file> <path_to_destination>',
                'Compress file', required=2),
    CommandSpec('decompress', 'decompress', 'decompress <path_to_file> <path_to_destination>',
                'Decompress file', required=2),
    CommandSpec('exit', 'exit', 'exit', 'Exit the File Manager'),
]}


class FileManager:
    """
    File operations relative to a session's current directory.

    Every public handler takes the raw string arguments of the command line
    and resolves paths through the session.
    """

    def __init__(self, session: Session, engine: Optional[TransferEngine] = None):
        self.session = session
        self.engine = engine or TransferEngine()

    def _existing_file(self, path: str) -> str:
        resolved = self.session.resolve(path)
        if not os.path.isfile(resolved):
            raise ResolutionError("file not found")
        return resolved

    def _destination(self, source: str, dst: str) -> str:
        """Resolve dst; an existing directory receives the source's name."""
        resolved = self.session.resolve(dst)
        if os.path.isdir(resolved):
            resolved = os.path.join(resolved, os.path.basename(source))
        return resolved

    def _location(self) -> CommandResult:
        cwd = self.session.current_directory
        return CommandResult(data=cwd, text=f"You are currently in {cwd}")

    # Navigation

    def ls(self) -> CommandResult:
        """List files and directories.

        Usage:
            ls

        Examples:
            ls                     # List the current directory

        Returns:
            Entries of the current directory, in the order the platform lists them.
        """
        entries = os.listdir(self.session.current_directory)
        return CommandResult(data=entries, text='\n'.join(entries))

    def cd(self, directory: str) -> CommandResult:
        """Change directory.

        Usage:
            cd <directory>

        Options:
            directory              Relative or absolute path of a directory

        Examples:
            cd docs                # Enter docs below the current directory
            cd /tmp                # Jump to /tmp
            cd ..                  # Go to the parent directory
        """
        self.session.change_directory(directory)
        return self._location()

    def up(self) -> CommandResult:
        """Go to parent directory.

        Usage:
            up

        Examples:
            up                     # Leave the current directory
        """
        self.session.go_up()
        return self._location()

    # File operations

    def cat(self, filename: str) -> CommandResult:
        """Display file content.

        Usage:
            cat <filename>

        Examples:
            cat notes.txt          # Print notes.txt
        """
        path = self._existing_file(filename)
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            content = f.read()
        return CommandResult(data=content, text=content)

    def add(self, filename: str) -> CommandResult:
        """Create empty file.

        An existing file with the same name is truncated.

        Usage:
            add <filename>

        Examples:
            add notes.txt          # Create an empty notes.txt
        """
        path = self.session.resolve(filename)
        if os.path.exists(path) and not os.path.isfile(path):
            raise ResolutionError("not a regular file")
        with open(path, 'w'):
            pass
        return CommandResult(data=path, text="File created successfully.")

    def rn(self, old: str, new: str) -> CommandResult:
        """Rename file.

        Usage:
            rn <path_to_file> <new_filename>

        Examples:
            rn draft.txt final.txt # Rename draft.txt to final.txt
        """
        source = self.session.resolve(old)
        if not os.path.lexists(source):
            raise ResolutionError("file not found")
        target = self.session.resolve(new)
        os.rename(source, target)
        return CommandResult(data=target, text="File renamed successfully.")

    def cp(self, src: str, dst: str) -> CommandResult:
        """Copy file.

        Usage:
            cp <path_to_file> <path_to_new_directory>

        Examples:
            cp notes.txt backup    # Copy into the backup directory
            cp notes.txt copy.txt  # Copy under a new name
        """
        source = self._existing_file(src)
        target = self._destination(source, dst)
        shutil.copyfile(source, target)
        return CommandResult(data=target, text="File copied successfully.")

    def mv(self, src: str, dst: str) -> CommandResult:
        """Move file.

        Moving across filesystems is not supported and fails.

        Usage:
            mv <path_to_file> <path_to_new_directory>

        Examples:
            mv notes.txt archive   # Move into the archive directory
        """
        source = self._existing_file(src)
        target = self._destination(source, dst)
        os.rename(source, target)
        return CommandResult(data=target, text="File moved successfully.")

    def rm(self, filename: str) -> CommandResult:
        """Delete file.

        Usage:
            rm <path_to_file>

        Examples:
            rm old.txt             # Delete old.txt
        """
        path = self.session.resolve(filename)
        os.remove(path)
        return CommandResult(data=path, text="File deleted successfully.")

    # Host information

    def os_info(self, option: str) -> CommandResult:
        """Get operating system information.

        Usage:
            os --eol|--cpus|--homedir|--username|--architecture

        Options:
            --eol                  Default system End-Of-Line
            --cpus                 Host machine CPUs info
            --homedir              Home directory
            --username             Current system user name
            --architecture         CPU architecture

        Examples:
            os --cpus              # List CPUs with model and clock speed
        """
        flag = option.lower()
        if flag == '--eol':
            value = platform_info.eol()
            return CommandResult(data=value, text=f"End-Of-Line (EOL): {json.dumps(value)}")
        if flag == '--cpus':
            cpus = platform_info.cpus()
            lines = [f"Host machine CPUs info (overall amount: {len(cpus)}):"]
            for index, cpu in enumerate(cpus, 1):
                speed = f"{cpu.speed_mhz:.0f} MHz" if cpu.speed_mhz else "unknown"
                lines.append(f"CPU {index}: Model: {cpu.model}, Speed: {speed}")
            return CommandResult(data=cpus, text='\n'.join(lines))
        if flag == '--homedir':
            value = platform_info.homedir()
            return CommandResult(data=value, text=f"Home directory: {value}")
        if flag == '--username':
            value = platform_info.username()
            return CommandResult(data=value, text=f"Current system user name: {value}")
        if flag == '--architecture':
            value = platform_info.architecture()
            return CommandResult(data=value, text=f"CPU architecture: {value}")
        raise UsageError(f"unknown option '{option}'")

    # Streaming operations

    def hash(self, filename: str) -> CommandResult:
        """Calculate hash for file.

        Usage:
            hash <path_to_file>

        Examples:
            hash archive.tar       # Print the SHA-256 digest of archive.tar

        Returns:
            The hexadecimal SHA-256 digest, computed while streaming the file.
        """
        result = self.engine.hash(self.session.resolve(filename))
        return CommandResult(data=result.digest, text=f"Hash '{filename}': {result.digest}")

    def compress(self, src: str, dst: str) -> CommandResult:
        """Compress file.

        Usage:
            compress <path_to_file> <path_to_destination>

        Examples:
            compress log.txt log   # Write log.gz

        Returns:
            The gzip file is written to <path_to_destination>.gz.
        """
        destination = self.session.resolve(dst)
        self.engine.compress(self.session.resolve(src), destination)
        return CommandResult(data=compressed_name(destination),
                             text="File compressed successfully.")

    def decompress(self, src: str, dst: str) -> CommandResult:
        """Decompress file.

        Usage:
            decompress <path_to_file> <path_to_destination>

        Examples:
            decompress log.gz log.txt  # Restore log.txt

        Returns:
            A trailing .gz is removed from <path_to_destination>.
        """
        destination = self.session.resolve(dst)
        self.engine.decompress(self.session.resolve(src), destination)
        return CommandResult(data=decompressed_name(destination),
                             text="File decompressed successfully.")
