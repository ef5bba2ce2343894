#!/usr/bin/env python3
"""
Interactive terminal for the file manager.

This module owns the read-eval-print loop: it reads one line at a time,
parses it, dispatches it through the static command table and prints one
result or error block before prompting again.

Design Principles:
- Parsing, dispatch and file operations live in separate layers
- Every failure is caught at the dispatch boundary and becomes one line
- The loop ends only on 'exit' (or end of input)
"""

import os
import sys
import logging
from typing import Optional, List
from dataclasses import dataclass, field

try:
    import readline  # noqa: F401 (line editing and history for input())
except ImportError:
    readline = None

from .command_parser import CommandParser, Command
from .commands import COMMANDS, CommandResult, CommandSpec, FileManager
from .errors import (
    FileManagerError, ResolutionError, TransferError, UsageError, describe_error
)
from .session import Session
from .transfer import CHUNK_SIZE, TransferEngine

logger = logging.getLogger(__name__)

# Prefix of the failure line for commands that stream data
FAILURE_PREFIXES = {
    'compress': 'Compression failed',
    'decompress': 'Decompression failed',
}


@dataclass
class TerminalConfig:
    """Configuration for a file manager session."""
    username: str = ''
    initial_dir: str = field(default_factory=lambda: os.path.expanduser('~'))
    prompt_format: str = '{username}@file-manager> '
    chunk_size: int = CHUNK_SIZE
    compression_level: int = 6
    log_level: str = 'WARNING'


class CommandExecutor:
    """
    Dispatches parsed commands to FileManager handlers.

    Looks the command up in COMMANDS, checks the argument count before any
    handler runs, and converts every exception into a CommandResult.
    'exit' never reaches the executor; TerminalSession ends the loop itself.
    """

    def __init__(self, manager: FileManager):
        """Initialize with a FileManager bound to a session."""
        self.manager = manager

    def execute(self, command: Command) -> CommandResult:
        """Execute a single command and return its result."""
        spec = COMMANDS.get(command.name)

        if spec is None:
            return CommandResult(
                text=f"Invalid input: unknown command '{command.token or command.name}'. "
                     f"Type 'help' to see available commands.",
                exit_code=127
            )

        if len(command.args) < spec.required:
            return CommandResult(
                text=f"Invalid input: missing {spec.missing}.",
                exit_code=2
            )

        logger.debug("dispatching %s", command)

        if spec.name == 'help':
            return self._show_help(command.arg(0) or None)

        method = getattr(self.manager, spec.handler)
        try:
            return method(*command.args[:spec.required])
        except (UsageError, ResolutionError) as e:
            return CommandResult(text=f"Invalid input: {e}.", exit_code=1)
        except TransferError as e:
            logger.warning("%s failed in %s stage: %s", spec.name, e.stage, e)
            return self._failure(spec, e)
        except (OSError, FileManagerError) as e:
            logger.warning("%s failed: %s", spec.name, e)
            return self._failure(spec, e)
        except Exception as e:
            logger.exception("unexpected error in %s", spec.name)
            return self._failure(spec, e)
        finally:
            self.manager.session.revalidate()

    def _failure(self, spec: CommandSpec, error: BaseException) -> CommandResult:
        prefix = FAILURE_PREFIXES.get(spec.name, 'Operation failed')
        return CommandResult(text=f"{prefix}: {describe_error(error)}", exit_code=1)

    def _show_help(self, command: Optional[str] = None) -> CommandResult:
        """Show help information for commands."""
        if command:
            return self._show_command_help(command)
        return self._show_all_commands_help()

    def _extract_docstring_sections(self, docstring: str) -> dict:
        """Extract structured sections from a handler docstring."""
        if not docstring:
            return {}

        lines = docstring.strip().split('\n')
        sections = {
            'description': lines[0].strip(),
            'notes': [],
            'options': [],
            'examples': []
        }

        current_section = 'notes'
        for line in lines[1:]:
            line = line.strip()
            if line.startswith('Usage:'):
                current_section = 'usage'
            elif line.startswith('Options:'):
                current_section = 'options'
            elif line.startswith('Examples:'):
                current_section = 'examples'
            elif line.startswith('Returns:'):
                current_section = 'returns'
            elif not line:
                continue
            elif current_section in ('notes', 'options', 'examples'):
                sections[current_section].append(line)

        return sections

    def _show_command_help(self, command: str) -> CommandResult:
        """Show detailed help for a specific command."""
        spec = COMMANDS.get(command.lower())
        if spec is None:
            return CommandResult(
                text=f"Invalid input: unknown command '{command}'. "
                     f"Type 'help' to see available commands.",
                exit_code=1
            )

        method = getattr(self.manager, spec.handler, None)
        sections = self._extract_docstring_sections(method.__doc__ if method else None)

        help_lines = [f"{spec.name} - {spec.summary}", "", "Usage:", f"    {spec.usage}", ""]

        if sections.get('notes'):
            help_lines.extend(sections['notes'])
            help_lines.append("")

        if sections.get('options'):
            help_lines.append("Options:")
            help_lines.extend(f"    {opt}" for opt in sections['options'])
            help_lines.append("")

        if sections.get('examples'):
            help_lines.append("Examples:")
            help_lines.extend(f"    {ex}" for ex in sections['examples'])
            help_lines.append("")

        help_text = '\n'.join(help_lines).rstrip()
        return CommandResult(data=spec, text=help_text)

    def _show_all_commands_help(self) -> CommandResult:
        """List every command with its usage line."""
        width = max(len(spec.usage) for spec in COMMANDS.values())
        help_lines = ["Available commands:"]
        for spec in COMMANDS.values():
            help_lines.append(f"  {spec.usage:<{width}}  {spec.summary}")
        help_lines.append("")
        help_lines.append("Type 'help <command>' for details on a single command.")

        help_text = '\n'.join(help_lines)
        return CommandResult(data=list(COMMANDS), text=help_text)


class TerminalSession:
    """
    Main terminal session manager.

    Provides the REPL loop and owns the session state, the parser and the
    executor for the lifetime of one interactive run.
    """

    def __init__(self, config: Optional[TerminalConfig] = None):
        """Initialize terminal session."""
        self.config = config or TerminalConfig()
        self.session = Session(username=self.config.username,
                               current_directory=self.config.initial_dir)
        self.engine = TransferEngine(chunk_size=self.config.chunk_size,
                                     compression_level=self.config.compression_level)
        self.manager = FileManager(self.session, self.engine)
        self.parser = CommandParser()
        self.executor = CommandExecutor(self.manager)
        self.running = False

    def get_prompt(self) -> str:
        """Generate the command prompt."""
        return self.config.prompt_format.format(
            username=self.session.username,
            cwd=self.session.current_directory
        )

    def greeting(self) -> str:
        return (f"Welcome to the File Manager, {self.session.username}!\n"
                f"Starting working directory is: {self.session.current_directory}")

    def farewell(self) -> str:
        return f"Thank you for using File Manager, {self.session.username}, goodbye!"

    def execute_command(self, command_line: str) -> Optional[str]:
        """
        Execute a command line and return the output.

        Returns None for exit commands.
        """
        command = self.parser.parse(command_line)

        if not command.name:
            return ''

        if command.name == 'exit':
            return None

        result = self.executor.execute(command)
        return str(result)

    def close(self):
        """Stop the loop."""
        self.running = False

    def run_interactive(self) -> int:
        """Run the interactive REPL loop and return the exit status."""
        self.running = True
        print(self.greeting())

        while self.running:
            try:
                command_line = input(self.get_prompt())
                output = self.execute_command(command_line)
                if output is None:
                    break
                if command_line.strip():
                    print(output)
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                print()
                break

        self.close()
        print(self.farewell())
        return 0

    def run_command(self, command_line: str) -> str:
        """
        Run a single command and return output.

        This method is useful for non-interactive use.
        """
        output = self.execute_command(command_line)
        return output if output is not None else self.farewell()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the file manager."""
    import argparse

    parser = argparse.ArgumentParser(description='Interactive File Manager')
    parser.add_argument('--username', default='', help='Name used in prompts and messages')
    parser.add_argument('-d', '--directory', default=None,
                        help='Starting directory (default: home directory)')
    parser.add_argument('-c', '--command', help='Execute command and exit')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level for diagnostics on stderr')
    args = parser.parse_args(argv)

    config = TerminalConfig(username=args.username, log_level=args.log_level)
    if args.directory:
        config.initial_dir = args.directory

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
        stream=sys.stderr
    )

    try:
        session = TerminalSession(config=config)
    except ResolutionError as e:
        print(f"File Manager cannot start: {e}", file=sys.stderr)
        return 1

    if args.command:
        output = session.run_command(args.command)
        if output:
            print(output)
        return 0

    print("File Manager is starting...")
    return session.run_interactive()


if __name__ == '__main__':
    sys.exit(main())
