from loguru import logger

from salvo.auth import AuthenticationStateMachine
from salvo.config import TransportKind
from salvo.errors import (
    SalvoError,
    TransportUnavailable,
    SpawnFailure,
    AuthenticationFailure,
)
from salvo.eventlog import JsonEventLog
from salvo.executor import CommandExecutor
from salvo.models import CommandResult, CommandStatus, HostOutcome
from salvo.prompts import PromptMatcher
from salvo.session import SessionSpawner
from salvo.transport import TransportProber

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

ALIVE_BUT_DENIED = "host alive but access denied or firewalled"
UNREACHABLE = "host unreachable"


class SessionOrchestrator(object):
    """Run the command list against each host, one host at a time

    A failure on one host (or one command) is recorded in that host's
    HostOutcome and never stops the rest of the run.
    """

    def __init__(self, config=None, prober=None, spawner=None, auth=None,
        executor=None, eventlog=None):
        assert config is not None
        self.config = config
        self.eventlog = eventlog or JsonEventLog(config.json_logfile)

        matcher = PromptMatcher(debug=config.debug)
        self.prober = prober or TransportProber(config=config)
        self.spawner = spawner or SessionSpawner(config=config, matcher=matcher)
        self.auth = auth or AuthenticationStateMachine(
            config=config, matcher=matcher, eventlog=self.eventlog
        )
        self.executor = executor or CommandExecutor(
            config=config, matcher=matcher, auth=self.auth, eventlog=self.eventlog
        )

    def run(self, hosts=(), commands=(), username="", password=""):
        return list(self.iter_outcomes(hosts, commands, username, password))

    def iter_outcomes(self, hosts=(), commands=(), username="", password=""):
        """Yield a finished HostOutcome per host, in input order"""
        for host in hosts:
            yield self.process_host(host, commands, username, password)

    def process_host(self, host="", commands=(), username="", password=""):
        outcome = HostOutcome(host)

        transport = self.prober.probe(host)
        outcome.transport = transport
        self.eventlog.entry(host=host, cmd="", action="probe", result=transport)

        if transport == TransportKind.NONE:
            outcome.error = TransportUnavailable(
                "host:{} has neither port {} nor port {} open".format(
                    host, self.config.secure_port, self.config.legacy_port
                )
            )
            logger.warning(str(outcome.error))
            return outcome.finish()

        outcome.reached = True
        logger.info("host:{} using {} transport".format(host, transport))

        session = None
        try:
            session = self.spawner.spawn(host=host, username=username, transport=transport)
            authenticated = self.auth.login(session, password)

            if (not authenticated) and session.offered_algorithms:
                # Old ssh servers; retry once with the algorithms they offered
                offered = session.offered_algorithms
                session.close()
                session = self.spawner.spawn(
                    host=host,
                    username=username,
                    transport=transport,
                    offered_algorithms=offered,
                )
                authenticated = self.auth.login(session, password)

            if not authenticated:
                outcome.error = AuthenticationFailure(
                    "host:{} {}".format(host, session.failure)
                )
                outcome.diagnosis = self.diagnose(host)
                return outcome.finish()

            outcome.authenticated = True
            self.run_commands(session, outcome, commands, password)

        except SpawnFailure as ee:
            logger.error("host:{} {}".format(host, ee))
            outcome.error = ee

        except SalvoError as ee:
            logger.error("host:{} aborted: {}".format(host, ee))
            outcome.error = ee

        finally:
            if session is not None:
                session.close()
                self.eventlog.entry(host=host, cmd="", action="close")

        return outcome.finish()

    def run_commands(self, session, outcome, commands=(), password=""):
        for command in commands:
            if session.state != "READY":
                # The session died under an earlier command
                outcome.add_result(
                    CommandResult(session.host, command.strip(), None, CommandStatus.DISCONNECTED)
                )
                continue
            outcome.add_result(self.executor.execute(session, command, password=password))

    def diagnose(self, host=""):
        if self.prober.is_alive(host):
            return ALIVE_BUT_DENIED
        return UNREACHABLE
