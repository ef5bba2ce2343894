#!/usr/bin/env python3
"""
Tests for the FileManager command handlers against a real temporary tree.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
import tempfile
import shutil
import hashlib
from pathlib import Path
from unittest.mock import patch

from filemanager.commands import COMMANDS, CommandResult, FileManager
from filemanager.errors import ResolutionError, TransferError, UsageError
from filemanager.platform_info import CpuInfo
from filemanager.session import Session


@pytest.fixture
def temp_dir():
    temp = os.path.realpath(tempfile.mkdtemp())
    yield Path(temp)
    shutil.rmtree(temp, ignore_errors=True)


@pytest.fixture
def manager(temp_dir):
    (temp_dir / 'docs').mkdir()
    (temp_dir / 'hello.txt').write_text('Hello, world!\n')
    return FileManager(Session(username='alice', current_directory=str(temp_dir)))


class TestCommandTable:
    """The static command table."""

    def test_all_commands_present(self):
        assert list(COMMANDS) == [
            'help', 'ls', 'cd', 'up', 'cat', 'add', 'rn', 'cp', 'mv', 'rm',
            'os', 'hash', 'compress', 'decompress', 'exit',
        ]

    def test_handlers_exist(self, manager):
        for spec in COMMANDS.values():
            if spec.name in ('help', 'exit'):
                continue
            assert callable(getattr(manager, spec.handler))

    def test_required_arguments(self):
        assert COMMANDS['cd'].required == 1
        assert COMMANDS['rn'].required == 2
        assert COMMANDS['ls'].required == 0
        assert COMMANDS['os'].missing == 'option argument'


class TestCommandResult:

    def test_str_prefers_text(self):
        assert str(CommandResult(data=['a'], text='shown')) == 'shown'

    def test_str_of_list(self):
        assert str(CommandResult(data=['a', 'b'])) == 'a\nb'

    def test_str_of_nothing(self):
        assert str(CommandResult()) == ''


class TestNavigation:

    def test_ls(self, manager):
        result = manager.ls()
        assert sorted(result.data) == ['docs', 'hello.txt']
        assert set(result.text.split('\n')) == {'docs', 'hello.txt'}

    def test_cd_and_up(self, manager, temp_dir):
        result = manager.cd('docs')
        assert result.text == f"You are currently in {temp_dir / 'docs'}"
        result = manager.up()
        assert result.data == str(temp_dir)

    def test_cd_missing(self, manager, temp_dir):
        with pytest.raises(ResolutionError):
            manager.cd('nowhere')
        assert manager.session.current_directory == str(temp_dir)


class TestFileOperations:

    def test_cat(self, manager):
        assert manager.cat('hello.txt').text == 'Hello, world!\n'

    def test_cat_missing(self, manager):
        with pytest.raises(ResolutionError, match='file not found'):
            manager.cat('missing.txt')

    def test_cat_directory(self, manager):
        with pytest.raises(ResolutionError):
            manager.cat('docs')

    def test_cat_binary_replaces_bad_bytes(self, manager, temp_dir):
        (temp_dir / 'bin').write_bytes(b'ok\xff')
        assert manager.cat('bin').text == 'ok\ufffd'

    def test_add_then_cat_is_empty(self, manager, temp_dir):
        assert manager.add('note.txt').text == 'File created successfully.'
        assert (temp_dir / 'note.txt').exists()
        assert manager.cat('note.txt').text == ''

    def test_add_truncates_existing(self, manager, temp_dir):
        manager.add('hello.txt')
        assert (temp_dir / 'hello.txt').read_text() == ''

    def test_add_over_directory(self, manager):
        with pytest.raises(ResolutionError):
            manager.add('docs')

    def test_rename(self, manager, temp_dir):
        manager.add('note.txt')
        assert manager.rn('note.txt', 'final.txt').text == 'File renamed successfully.'
        assert manager.cat('final.txt').text == ''
        with pytest.raises(ResolutionError):
            manager.cat('note.txt')

    def test_rename_missing(self, manager):
        with pytest.raises(ResolutionError):
            manager.rn('missing.txt', 'other.txt')

    def test_copy_to_file(self, manager, temp_dir):
        manager.cp('hello.txt', 'copy.txt')
        assert (temp_dir / 'copy.txt').read_text() == 'Hello, world!\n'
        assert (temp_dir / 'hello.txt').exists()

    def test_copy_into_directory(self, manager, temp_dir):
        result = manager.cp('hello.txt', 'docs')
        assert result.data == str(temp_dir / 'docs' / 'hello.txt')
        assert (temp_dir / 'docs' / 'hello.txt').read_text() == 'Hello, world!\n'

    def test_copy_missing(self, manager):
        with pytest.raises(ResolutionError):
            manager.cp('missing.txt', 'docs')

    def test_copy_onto_itself(self, manager):
        with pytest.raises(OSError):
            manager.cp('hello.txt', 'hello.txt')

    def test_move_into_directory(self, manager, temp_dir):
        assert manager.mv('hello.txt', 'docs').text == 'File moved successfully.'
        assert not (temp_dir / 'hello.txt').exists()
        assert (temp_dir / 'docs' / 'hello.txt').read_text() == 'Hello, world!\n'

    def test_move_cross_device_is_plain_error(self, manager):
        error = OSError(18, 'Invalid cross-device link')
        with patch('filemanager.commands.os.rename', side_effect=error):
            with pytest.raises(OSError, match='cross-device'):
                manager.mv('hello.txt', '/mnt/other/hello.txt')

    def test_remove(self, manager, temp_dir):
        assert manager.rm('hello.txt').text == 'File deleted successfully.'
        assert not (temp_dir / 'hello.txt').exists()

    def test_remove_missing(self, manager):
        with pytest.raises(FileNotFoundError):
            manager.rm('missing.txt')


class TestOsInfo:

    def test_eol(self, manager):
        with patch('filemanager.platform_info.os.linesep', '\r\n'):
            result = manager.os_info('--eol')
        assert result.data == '\r\n'
        assert result.text == 'End-Of-Line (EOL): "\\r\\n"'

    def test_cpus(self, manager):
        cpus = [CpuInfo('Example CPU', 2400.0), CpuInfo('Example CPU')]
        with patch('filemanager.platform_info.cpus', return_value=cpus):
            result = manager.os_info('--cpus')
        lines = result.text.split('\n')
        assert lines[0] == 'Host machine CPUs info (overall amount: 2):'
        assert lines[1] == 'CPU 1: Model: Example CPU, Speed: 2400 MHz'
        assert lines[2] == 'CPU 2: Model: Example CPU, Speed: unknown'

    def test_homedir(self, manager):
        assert manager.os_info('--homedir').text == f"Home directory: {os.path.expanduser('~')}"

    def test_username(self, manager):
        with patch('filemanager.platform_info.getpass.getuser', return_value='bob'):
            assert manager.os_info('--username').text == 'Current system user name: bob'

    def test_architecture_case_insensitive(self, manager):
        with patch('filemanager.platform_info.platform.machine', return_value='x86_64'):
            assert manager.os_info('--ARCHITECTURE').text == 'CPU architecture: x86_64'

    def test_unknown_option(self, manager):
        with pytest.raises(UsageError, match="unknown option '--kernel'"):
            manager.os_info('--kernel')


class TestStreamingCommands:

    def test_hash(self, manager):
        digest = hashlib.sha256(b'Hello, world!\n').hexdigest()
        result = manager.hash('hello.txt')
        assert result.data == digest
        assert result.text == f"Hash 'hello.txt': {digest}"

    def test_hash_missing(self, manager):
        with pytest.raises(TransferError):
            manager.hash('missing.txt')

    def test_compress_and_decompress(self, manager, temp_dir):
        result = manager.compress('hello.txt', 'docs/hello')
        assert result.text == 'File compressed successfully.'
        assert result.data == str(temp_dir / 'docs' / 'hello.gz')

        result = manager.decompress('docs/hello.gz', 'restored.txt.gz')
        assert result.text == 'File decompressed successfully.'
        assert result.data == str(temp_dir / 'restored.txt')
        assert (temp_dir / 'restored.txt').read_text() == 'Hello, world!\n'
