import time

import pytest

from salvo.config import RunConfig, Platform, TransportKind
from salvo.session import ScriptedSession

ROUTER_LOGIN = dict(greeting="Password: ", script=["\r\nr1#"])


@pytest.fixture
def router_config():
    return RunConfig(platform=Platform.ROUTER_CLI, login_timeout=0.3, command_timeout=0.3)


@pytest.fixture
def unix_config():
    return RunConfig(platform=Platform.UNIX_SHELL, login_timeout=0.3, command_timeout=0.3)


@pytest.fixture
def ready_router():
    """A ScriptedSession already sitting at an 'r1#' prompt"""
    def _build(replies=None, script=()):
        session = ScriptedSession(host="r1", replies=replies, script=script)
        session._go_READY()
        return session
    return _build


class FakeProber(object):
    """Stand-in for TransportProber; no sockets, no ping"""

    def __init__(self, transports=None, alive=None):
        self.transports = transports or {}
        self.alive = alive or {}
        self.probed = list()
        self.pinged = list()

    def probe(self, host=""):
        self.probed.append(host)
        return self.transports.get(host, TransportKind.NONE)

    def is_alive(self, host=""):
        self.pinged.append(host)
        return self.alive.get(host, False)


class ScriptedFactory(object):
    """session_factory for SessionSpawner that hands out ScriptedSessions by host"""

    def __init__(self, sessions=None):
        self.sessions = sessions or {}
        self.connect_cmds = list()
        self.spawned = list()

    def __call__(self, host="", transport="", connect_cmd="", config=None):
        self.connect_cmds.append(connect_cmd)
        builder = self.sessions[host]
        if isinstance(builder, list):
            builder = builder.pop(0)
        session = builder(host, transport)
        self.spawned.append(session)
        return session


@pytest.fixture
def fake_prober():
    return FakeProber


@pytest.fixture
def scripted_factory():
    return ScriptedFactory


class LateDevice(ScriptedSession):
    """ScriptedSession whose `late` replies only arrive `delay` seconds after the command"""

    def __init__(self, late=None, delay=0.4, **kwargs):
        super(LateDevice, self).__init__(**kwargs)
        self.late = dict(late or {})
        self.delay = delay
        self._due = list()

    def _write(self, text):
        line = text.rstrip("\r\n")
        if line in self.late:
            self.sent.append(line)
            self._due.append((time.monotonic() + self.delay, self.late[line]))
        else:
            super(LateDevice, self)._write(text)

    def _read(self, timeout):
        while len(self._due) > 0 and self._due[0][0] <= time.monotonic():
            self._emit(self._due.pop(0)[1])
        return super(LateDevice, self)._read(timeout)


@pytest.fixture
def late_device():
    return LateDevice


@pytest.fixture
def pty_device(tmp_path):
    """Write a /bin/sh script standing in for a device; return its connect command"""
    def _build(body=""):
        script = tmp_path / "device.sh"
        script.write_text(body)
        return "/bin/sh {}".format(script)
    return _build
