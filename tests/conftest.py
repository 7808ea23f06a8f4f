import sys
from collections import deque
from pathlib import Path

import pytest

from engine.errors import PeerClosed

ROOT = Path(__file__).resolve().parent.parent


class ScriptedSeat:
    """Player channel that replays canned replies and records what it was sent."""

    def __init__(self, replies=()):
        self.replies = deque(replies)
        self.sent = []

    def send(self, line):
        self.sent.append(line)

    def receive(self):
        if not self.replies:
            raise PeerClosed("script exhausted")
        return self.replies.popleft()


@pytest.fixture
def deck_file(tmp_path):
    def write(codes, *, header=None, name="deck.txt"):
        path = tmp_path / name
        first = str(len(codes)) if header is None else header
        path.write_text("\n".join([first, *codes]) + "\n", encoding="ascii")
        return str(path)

    return write


@pytest.fixture
def shell_player(tmp_path):
    """Write an executable /bin/sh script and return its path."""

    def write(name, body):
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(0o755)
        return str(path)

    return write


@pytest.fixture
def policy_player(shell_player):
    """Executable that runs one of the shipped policies with this checkout on the path."""

    def make(policy):
        return shell_player(
            f"{policy}.sh",
            f'export PYTHONPATH="{ROOT}"\nexec "{sys.executable}" -m bots.cli {policy} "$@"',
        )

    return make
