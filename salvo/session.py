import time
import sys
import os

from rich import print as rich_print
from loguru import logger
import pexpect as px
import transitions

from salvo.config import TransportKind, HostKeyPolicy
from salvo.errors import SpawnFailure, SessionClosed, EndOfStream
from salvo.prompts import PromptMatcher, PromptEvent, catalog_for

r"""
salvo - Python ssh automation
Copyright (C) 2022      David Michael Pennington

Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are
met:

1.  Redistributions of source code must retain the above copyright
    notice, this list of conditions and the following disclaimer.

2.  Redistributions in binary form must reproduce the above copyright
    notice, this list of conditions and the following disclaimer in the
    documentation and/or other materials provided with the distribution.

3.  Neither the name of the copyright holder nor the names of its
    contributors may be used to endorse or promote products derived from
    this software without specific prior written permission.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
"AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A
PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT
HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL,
SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED
TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR
PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS
SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""


class TeeStdoutFile(object):
    """Simple class to send a transcript to screen and log_file simultaneously"""

    def __init__(self, log_file="", filemode="a", log_screen=False, encoding="utf-8"):
        self.log_file = os.path.expanduser(log_file)
        self.filemode = filemode
        self.log_screen = log_screen
        self.stdout = sys.stdout
        self.encoding = encoding
        self.fh = open(self.log_file, self.filemode, encoding=self.encoding)

    def write(self, text):
        if isinstance(text, bytes):
            text = text.decode(self.encoding)
        self.fh.write(text)
        if self.log_screen:
            self.stdout.write(text)

    def flush(self):
        self.fh.flush()
        if self.log_screen:
            self.stdout.flush()

    def close(self):
        self.fh.close()


class RemoteSession(transitions.Machine):
    """One connection to one host: send text, receive text, detect end of stream

    Subclasses implement _write(), _read() and _close_transport().
    """

    STATES = (
        "CONNECTING",
        "AWAITING_CREDENTIALS",
        "READY",
        "FAILED",
        "CLOSED",
    )

    linesep = "\n"

    def __init__(self, host="", transport=TransportKind.SECURE, debug=0):
        super(RemoteSession, self).__init__(states=self.STATES, initial="CONNECTING")

        self.host = host
        self.transport = transport
        self.debug = debug
        self.failure = ""  # Why login failed, for reporting
        self.offered_algorithms = {}  # ssh algorithms a legacy server offered
        self._pending = ""
        self.out_of_sync = False  # A command timed out; late output may still arrive

        self.add_transition(
            trigger="_go_AWAITING_CREDENTIALS",
            source=["CONNECTING", "AWAITING_CREDENTIALS"],
            dest="AWAITING_CREDENTIALS",
        )
        self.add_transition(
            trigger="_go_READY",
            source=["CONNECTING", "AWAITING_CREDENTIALS"],
            dest="READY",
        )
        self.add_transition(
            trigger="_go_FAILED",
            source=["CONNECTING", "AWAITING_CREDENTIALS", "READY"],
            dest="FAILED",
        )
        self.add_transition(
            trigger="_go_CLOSED",
            source="*",
            dest="CLOSED",
            after="after_CLOSED_cb",
        )

    def __repr__(self):
        return """<{} host:{} transport:{} state:{}>""".format(
            self.__class__.__name__, self.host, self.transport, self.state
        )

    def send(self, text):
        if self.state in ("FAILED", "CLOSED"):
            raise SessionClosed(
                "Cannot send on {} session to host:{}".format(self.state, self.host)
            )
        self._write(text)

    def sendline(self, text=""):
        self.send(text + self.linesep)

    def receive(self, timeout):
        """Return text received within `timeout` seconds ('' if none); raise EndOfStream at EOF"""
        return self._read(timeout)

    def take_pending(self):
        """Return and clear text read but not yet consumed by a prompt match"""
        pending, self._pending = self._pending, ""
        return pending

    def unread(self, text):
        """Push text back in front of the unconsumed input"""
        self._pending = text + self._pending

    def close(self):
        if self.state != "CLOSED":
            self._go_CLOSED()

    def after_CLOSED_cb(self):
        if self.debug:
            rich_print("    [bold blue]closing session to host:{}[/bold blue]".format(self.host))
        self._close_transport()

    def _write(self, text):
        raise NotImplementedError

    def _read(self, timeout):
        raise NotImplementedError

    def _close_transport(self):
        raise NotImplementedError


class PexpectSession(RemoteSession):
    """Drive an ssh or telnet client attached to a pseudo-terminal"""

    def __init__(self, host="", transport=TransportKind.SECURE, connect_cmd="", config=None):
        assert connect_cmd != ""
        assert config is not None
        super(PexpectSession, self).__init__(host=host, transport=transport, debug=config.debug)

        self.connect_cmd = connect_cmd
        self.transcript = None

        try:
            # spawnu Ref: https://stackoverflow.com/a/37654748/667301
            self.child = px.spawn(
                connect_cmd,
                timeout=config.login_timeout,
                encoding=config.encoding,
                codec_errors="replace",
                echo=False,
            )
        except px.exceptions.ExceptionPexpect as ee:
            raise SpawnFailure("Could not run '{}': {}".format(connect_cmd.split()[0], ee))
        except OSError as ee:
            raise SpawnFailure("Could not spawn a client for host:{}: {}".format(host, ee))

        # Only log what the host sends; passwords are never echoed back to us
        if config.log_file != "":
            self.transcript = TeeStdoutFile(
                log_file=config.log_file,
                log_screen=config.log_screen,
                encoding=config.encoding,
            )
            self.child.logfile_read = self.transcript
        elif config.log_screen:
            self.child.logfile_read = sys.stdout

    def _write(self, text):
        try:
            self.child.send(text)
        except (OSError, UnicodeError) as ee:
            raise SessionClosed("Cannot send to host:{}: {}".format(self.host, ee))

    def _read(self, timeout):
        try:
            return self.child.read_nonblocking(size=4096, timeout=timeout)
        except px.exceptions.TIMEOUT:
            return ""
        except px.exceptions.EOF:
            raise EndOfStream("host:{} closed the connection".format(self.host))
        except (OSError, UnicodeError) as ee:
            raise EndOfStream("host:{} read failed: {}".format(self.host, ee))

    def _close_transport(self):
        self.child.close(force=True)
        if self.transcript is not None:
            self.transcript.close()
            self.transcript = None


class ScriptedSession(RemoteSession):
    """In-memory session which plays back canned device output

    `greeting` is emitted as soon as the session opens.  Each sendline()
    looks the sent line up in `replies`; otherwise the next `script` entry
    is emitted.  An entry is a string, ScriptedSession.EOF, or a tuple of
    both.  Nothing is echoed automatically; put echoes in the entries.
    """

    EOF = object()

    def __init__(
        self,
        host="scripted",
        transport=TransportKind.SECURE,
        greeting="",
        script=(),
        replies=None,
        debug=0,
    ):
        super(ScriptedSession, self).__init__(host=host, transport=transport, debug=debug)
        self.script = list(script)
        self.replies = dict(replies or {})
        self.sent = list()
        self._queue = list()
        self._eof = False
        self._emit(greeting)

    def _emit(self, entry):
        if entry is None:
            return
        if not isinstance(entry, tuple):
            entry = (entry,)
        for item in entry:
            if item is self.EOF:
                self._eof = True
            elif item != "":
                self._queue.append(item)

    def _write(self, text):
        line = text.rstrip("\r\n")
        self.sent.append(line)
        if line in self.replies:
            self._emit(self.replies[line])
        elif len(self.script) > 0:
            self._emit(self.script.pop(0))

    def _read(self, timeout):
        if len(self._queue) > 0:
            return self._queue.pop(0)
        if self._eof:
            raise EndOfStream("host:{} closed the connection".format(self.host))
        # Nothing scripted... behave like a silent device
        time.sleep(min(timeout, 0.05))
        return ""

    def _close_transport(self):
        self._eof = True
        self._queue = list()


class SessionSpawner(object):
    """Build the client command for a transport and open a RemoteSession"""

    def __init__(self, config=None, matcher=None, session_factory=PexpectSession):
        assert config is not None
        self.config = config
        self.catalog = catalog_for(config)
        self.matcher = matcher or PromptMatcher(debug=config.debug)
        self.session_factory = session_factory

    def build_connect_cmd(self, host="", username="", transport=TransportKind.SECURE,
        offered_algorithms=None):
        config = self.config
        offered_algorithms = offered_algorithms or {}

        if transport == TransportKind.LEGACY:
            return "telnet {} {}".format(host, config.legacy_port)

        elif transport != TransportKind.SECURE:
            raise ValueError("Cannot build a connect command for transport='{}'".format(transport))

        opts = ["ssh", "-l", username, "-p", str(config.secure_port)]

        ciphers = offered_algorithms.get("ciphers", "")
        if ciphers:
            opts.extend(["-c", ciphers])
        key_exchanges = offered_algorithms.get("kex", "")
        if key_exchanges:
            opts.extend(["-o", "KexAlgorithms={}".format(key_exchanges)])

        if config.ssh_key != "":
            opts.extend(["-i", config.ssh_key])
        else:
            # https://serverfault.com/a/1002182/78702
            opts.extend(["-o", "PubkeyAuthentication=no"])

        if config.host_key_policy == HostKeyPolicy.STRICT:
            opts.extend(["-o", "StrictHostKeyChecking=yes"])
        elif config.host_key_policy == HostKeyPolicy.DISABLE:
            logger.warning(
                "host key checking is disabled for host:{}; the connection can be intercepted".format(host)
            )
            opts.extend(
                ["-o", "UserKnownHostsFile=/dev/null", "-o", "StrictHostKeyChecking=no"]
            )
        else:
            opts.extend(["-o", "StrictHostKeyChecking=accept-new"])

        if config.ssh_keepalive > 0:
            opts.extend(["-o", "ServerAliveInterval={}".format(config.ssh_keepalive)])

        opts.append(host)
        return " ".join(opts)

    def spawn(self, host="", username="", transport=TransportKind.SECURE,
        offered_algorithms=None):
        """Open a session to host; raise SpawnFailure if the client cannot start"""
        assert host != ""
        assert username != ""
        connect_cmd = self.build_connect_cmd(
            host=host,
            username=username,
            transport=transport,
            offered_algorithms=offered_algorithms,
        )
        logger.debug("spawning '{}'".format(connect_cmd))
        session = self.session_factory(
            host=host, transport=transport, connect_cmd=connect_cmd, config=self.config
        )

        if transport == TransportKind.LEGACY:
            self.send_legacy_username(session, username)
        return session

    def send_legacy_username(self, session, username):
        """Answer the telnet 'Username:' prompt; leave any other prompt for login()"""
        match = self.matcher.wait(
            session, self.catalog.legacy_login_patterns(), self.config.login_timeout
        )
        if match.event == PromptEvent.CREDENTIAL_PROMPT and match.index == 0:
            session._go_AWAITING_CREDENTIALS()
            session.sendline(username)

        elif match.event in (PromptEvent.CREDENTIAL_PROMPT, PromptEvent.READY_PROMPT):
            # No username prompt on this device; login() needs to see this prompt
            session.unread(match.after)

        elif match.event == PromptEvent.TIMEOUT:
            logger.warning("host:{} never asked for a username".format(session.host))

        return match.event