import io
import os
import signal
import subprocess
import sys
import time

import pytest

from bots.cli import PlayerExit, play, run_player
from bots.cli import exit_status as player_status
from bots.lead_high import LeadHighBot
from engine.cards import parse_card
from engine.errors import ConfigError, DeckError, MalformedMessage, PeerClosed, ProcessError, SignalReceived
from hub.cli import HubExit, main
from hub.cli import exit_status as hub_status
from hub.coordinator import Coordinator
from hub.supervisor import Supervisor

from conftest import ROOT

TWO_TRICK_DECK = ["S0", "S1", "H2", "H3"]


def test_full_game_between_player_processes(capsys, deck_file, policy_player):
    deck = deck_file(TWO_TRICK_DECK)
    player = policy_player("lead-high")

    status = main([deck, "2", player, player])

    captured = capsys.readouterr()
    assert status == HubExit.NORMAL
    assert captured.out == "Lead player=0\nCards=S.1 H.3\nLead player=0\nCards=S.0 H.2\n0:2 1:0\n"


def test_three_seat_game_with_mixed_policies(capsys, deck_file, policy_player):
    codes = ["Sa", "D1", "C4", "S2", "D7", "H4", "S5", "Dc", "C9"]
    deck = deck_file(codes)

    status = main([deck, "2", policy_player("lead-high"), policy_player("threshold-watch"), policy_player("random")])

    lines = capsys.readouterr().out.splitlines()
    assert status == HubExit.NORMAL
    assert lines[0] == "Lead player=0"
    assert lines[1].startswith("Cards=S.a ")
    assert len(lines) == 7
    assert lines[-1].startswith("0:")


def test_player_without_handshake(capsys, deck_file, shell_player):
    silent = shell_player("silent.sh", "exit 0")

    status = main([deck_file(TWO_TRICK_DECK), "2", silent, silent])

    captured = capsys.readouterr()
    assert status == HubExit.PROCESS_ERROR
    assert captured.out == ""
    assert captured.err.strip() == "Player error"


def test_missing_executable(deck_file, tmp_path):
    status = main([deck_file(TWO_TRICK_DECK), "2", str(tmp_path / "absent"), str(tmp_path / "absent")])
    assert status == HubExit.PROCESS_ERROR


def test_player_exiting_after_handshake(capsys, deck_file, shell_player):
    quitter = shell_player("quitter.sh", "printf '@'\nexit 0")

    status = main([deck_file(TWO_TRICK_DECK), "2", quitter, quitter])

    assert status == HubExit.PEER_CLOSED
    assert capsys.readouterr().out == "Lead player=0\n"


def test_garbled_play(capsys, deck_file, shell_player):
    garbler = shell_player("garbler.sh", "printf '@'\nread hand\nread round\nprintf 'PLAY@\\n'\ncat >/dev/null")

    status = main([deck_file(TWO_TRICK_DECK), "2", garbler, garbler])

    assert status == HubExit.MALFORMED_MESSAGE
    assert capsys.readouterr().err.strip() == "Invalid message"


def test_illegal_card_from_a_process(deck_file, shell_player):
    # Seat 0 holds S0 and S1 but claims a heart.
    cheat = shell_player("cheat.sh", "printf '@'\nread hand\nread round\nprintf 'PLAYH2\\n'\ncat >/dev/null")
    assert main([deck_file(TWO_TRICK_DECK), "2", cheat, cheat]) == HubExit.INVALID_CARD_CHOICE


def test_supervisor_kills_children_after_a_failure(shell_player):
    garbler = shell_player("garbler.sh", "printf '@'\nread hand\nread round\nprintf 'PLAY@\\n'\nexec sleep 30")
    deck = [parse_card(code) for code in TWO_TRICK_DECK]

    with pytest.raises(MalformedMessage):
        with Supervisor([garbler, garbler], threshold=2, hand_size=2) as supervisor:
            channels = supervisor.start()
            Coordinator(deck, channels, 2, out=io.StringIO()).run()

    assert len(supervisor.players) == 2
    assert not any(player.is_alive() for player in supervisor.players)


def test_supervisor_passes_game_arguments(shell_player, tmp_path):
    record = tmp_path / "args.txt"
    echo = shell_player("echo.sh", f'echo "$@" >> "{record}"\nprintf \'@\'\nexec sleep 30')

    with pytest.raises(RuntimeError):
        with Supervisor([echo, echo, echo], threshold=5, hand_size=7) as supervisor:
            supervisor.start()
            raise RuntimeError("stop")

    assert record.read_text().splitlines() == ["3 0 5 7", "3 1 5 7", "3 2 5 7"]
    assert not any(player.is_alive() for player in supervisor.players)


@pytest.mark.skipif(not hasattr(signal, "SIGHUP"), reason="platform has no SIGHUP")
def test_hangup_kills_children(shell_player):
    sleeper = shell_player("sleeper.sh", "printf '@'\nexec sleep 30")
    previous = signal.getsignal(signal.SIGHUP)

    with pytest.raises(SignalReceived):
        with Supervisor([sleeper, sleeper], threshold=2, hand_size=1) as supervisor:
            supervisor.start()
            os.kill(os.getpid(), signal.SIGHUP)
            time.sleep(5)

    assert not any(player.is_alive() for player in supervisor.players)
    assert signal.getsignal(signal.SIGHUP) == previous


@pytest.mark.parametrize(
    "argv, expected",
    [
        ([], HubExit.USAGE),
        (["deck.txt", "2"], HubExit.USAGE),
        (["deck.txt", "1", "p0"], HubExit.INVALID_THRESHOLD),
        (["deck.txt", "abc", "p0"], HubExit.INVALID_THRESHOLD),
        (["deck.txt", " 3", "p0"], HubExit.INVALID_THRESHOLD),
    ],
)
def test_hub_argument_errors(capsys, argv, expected):
    assert main(argv) == expected
    assert capsys.readouterr().err.strip() == {
        HubExit.USAGE: "Usage: trick-hub deck threshold player0 {player1}",
        HubExit.INVALID_THRESHOLD: "Invalid threshold",
    }[expected]


def test_hub_deck_errors(capsys, deck_file, tmp_path):
    assert main([str(tmp_path / "missing.txt"), "2", "p0", "p1"]) == HubExit.DECK_ERROR
    assert main([deck_file(["S0", "X9"]), "2", "p0", "p1"]) == HubExit.DECK_ERROR
    assert main([deck_file(["S0"]), "2", "p0", "p1"]) == HubExit.INSUFFICIENT_CARDS
    assert capsys.readouterr().err.splitlines() == ["Deck error", "Deck error", "Not enough cards"]


def test_player_plays_over_byte_streams():
    stdin = io.BytesIO(b"HAND2,S0,S1\nNEWROUND0\nPLAYED1,H3\nNEWROUND0\nPLAYED1,H2\nGAMEOVER\n")
    stdout = io.BytesIO()
    report = io.StringIO()

    play(LeadHighBot(), ["2", "0", "2", "2"], stdin, stdout, report=report)

    assert stdout.getvalue() == b"@PLAYS1\nPLAYS0\n"
    assert report.getvalue() == "Lead player=0: S.1 H.3\nLead player=0: S.0 H.2\n"


def test_player_rejects_bad_arguments_before_the_handshake():
    stdout = io.BytesIO()
    with pytest.raises(ConfigError) as excinfo:
        play(LeadHighBot(), ["2", "2", "2", "2"], io.BytesIO(), stdout)
    assert excinfo.value.setting == "player_id"
    assert stdout.getvalue() == b""


@pytest.mark.parametrize(
    "args, status, message",
    [
        (["2", "0", "2"], PlayerExit.USAGE, "Usage: player players myid threshold handsize"),
        (["1", "0", "2", "1"], PlayerExit.INVALID_PLAYERS, "Invalid players"),
        (["3", "3", "2", "1"], PlayerExit.INVALID_POSITION, "Invalid position"),
        (["3", "0", "1", "1"], PlayerExit.INVALID_THRESHOLD, "Invalid threshold"),
        (["3", "0", "2", "0"], PlayerExit.INVALID_HAND, "Invalid hand size"),
    ],
)
def test_player_process_argument_errors(policy_player, args, status, message):
    result = subprocess.run([policy_player("lead-high"), *args], input=b"", capture_output=True, timeout=30)
    assert result.returncode == status
    assert result.stdout == b""
    assert result.stderr.decode().strip() == message


def test_player_process_sees_end_of_input(policy_player):
    result = subprocess.run([policy_player("threshold-watch"), "2", "1", "2", "1"], input=b"", capture_output=True, timeout=30)
    assert result.returncode == PlayerExit.PEER_CLOSED
    assert result.stdout == b"@"
    assert result.stderr.decode().strip() == "EOF"


def test_player_process_rejects_garbage(policy_player):
    result = subprocess.run(
        [policy_player("random"), "2", "1", "2", "1"], input=b"HAND1,Z9\n", capture_output=True, timeout=30
    )
    assert result.returncode == PlayerExit.MALFORMED_MESSAGE
    assert result.stdout == b"@"


def test_exit_status_tables():
    assert hub_status(ConfigError("threshold")) == HubExit.INVALID_THRESHOLD
    assert hub_status(ConfigError("cards")) == HubExit.INSUFFICIENT_CARDS
    assert hub_status(DeckError()) == HubExit.DECK_ERROR
    assert hub_status(PeerClosed()) == HubExit.PEER_CLOSED
    assert hub_status(SignalReceived()) == HubExit.SIGNAL_RECEIVED
    assert player_status(PeerClosed()) == PlayerExit.PEER_CLOSED
    assert player_status(MalformedMessage()) == PlayerExit.MALFORMED_MESSAGE
    assert player_status(ConfigError("hand_size")) == PlayerExit.INVALID_HAND


def test_wrong_handshake_byte(capsys, deck_file, shell_player):
    impostor = shell_player("impostor.sh", "printf 'x'\nexec sleep 30")

    status = main([deck_file(TWO_TRICK_DECK), "2", impostor, impostor])

    captured = capsys.readouterr()
    assert status == HubExit.PROCESS_ERROR
    assert captured.out == ""
    assert captured.err.strip() == "Player error"


def test_supervisor_kills_a_player_with_the_wrong_handshake(shell_player):
    impostor = shell_player("impostor.sh", "printf 'x'\nexec sleep 30")

    with pytest.raises(ProcessError):
        with Supervisor([impostor, impostor], threshold=2, hand_size=1) as supervisor:
            supervisor.start()

    assert len(supervisor.players) == 1
    assert not supervisor.players[0].is_alive()


def test_hangup_during_spawn_still_kills_the_new_child(monkeypatch, shell_player):
    sleeper = shell_player("sleeper.sh", "printf '@'\nexec sleep 30")
    real_popen = subprocess.Popen

    with pytest.raises(SignalReceived):
        with Supervisor([sleeper, sleeper], threshold=2, hand_size=1) as supervisor:

            def popen_then_hangup(*args, **kwargs):
                process = real_popen(*args, **kwargs)
                supervisor.on_hangup(getattr(signal, "SIGHUP", 1), None)
                return process

            monkeypatch.setattr(subprocess, "Popen", popen_then_hangup)
            supervisor.start()

    assert len(supervisor.players) == 1
    assert not supervisor.players[0].is_alive()


@pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="interpreter has no integer digit limit")
def test_numbers_too_long_to_convert(capsys):
    assert main(["deck.txt", "1" * 5000, "p0"]) == HubExit.INVALID_THRESHOLD
    assert run_player(LeadHighBot(), ["1" * 5000, "0", "2", "1"]) == PlayerExit.INVALID_PLAYERS
    assert capsys.readouterr().err.splitlines() == ["Invalid threshold", "Invalid players"]


def test_player_program_does_not_load_the_hub():
    result = subprocess.run(
        [sys.executable, "-c", "import sys, bots.cli; print(sorted(m for m in sys.modules if m.startswith('hub')))"],
        cwd=str(ROOT),
        capture_output=True,
        timeout=30,
    )
    assert result.returncode == 0
    assert result.stdout.decode().strip() == "[]"
