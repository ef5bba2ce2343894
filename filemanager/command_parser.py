#!/usr/bin/env python3
"""
Command parser for the file manager prompt.

Turns one input line into a Command: a lower-cased name followed by its
arguments. The name as typed is kept for messages. The parser never touches the filesystem and never fails; deciding
whether a command is known or has enough arguments is the executor's job.
"""

import shlex
from typing import List
from dataclasses import dataclass, field


@dataclass
class Command:
    """A single command line split into name and arguments."""
    name: str
    args: List[str] = field(default_factory=list)
    token: str = ''  # name as typed

    def arg(self, index: int, default: str = '') -> str:
        """Return the argument at index, or default when it is absent."""
        return self.args[index] if index < len(self.args) else default

    def __str__(self) -> str:
        return ' '.join([self.name] + [shlex.quote(a) for a in self.args])


class CommandParser:
    """
    Parser for the file manager's line protocol.

    Tokens are separated by whitespace. Quotes group a path that contains
    spaces ("my file.txt"); a line with an unbalanced quote is split on
    whitespace instead of being rejected.
    """

    def tokenize(self, line: str) -> List[str]:
        """Split a line into tokens."""
        try:
            return shlex.split(line)
        except ValueError:
            # Unclosed quotes
            return line.split()

    def parse(self, line: str) -> Command:
        """
        Parse a command line.

        Returns a Command with an empty name for blank input.
        """
        if not line or not line.strip():
            return Command(name='')

        tokens = self.tokenize(line.strip())
        if not tokens:
            return Command(name='')

        return Command(name=tokens[0].lower(), args=tokens[1:], token=tokens[0])
