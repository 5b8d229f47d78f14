from io import StringIO
import unicodedata
import os
import re

from loguru import logger
from textfsm import TextFSM

from salvo.auth import AuthenticationStateMachine
from salvo.errors import SessionNotReady
from salvo.eventlog import JsonEventLog
from salvo.models import Command, CommandResult, CommandStatus
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

# https://stackoverflow.com/a/14693789/667301...
ANSI_ESCAPE = re.compile(r"(?:\x1B[@-Z\\-_]|[\x80-\x9A\x9C-\x9F]|(?:\x1B\[|\x9B)[0-?]*[ -/]*[@-~])")


def strip_text_colors(text=""):
    return ANSI_ESCAPE.sub("", text)


def strip_control_chars(line=""):
    # https://stackoverflow.com/a/19016117/667301
    return "".join(
        ch for ch in line if ch == "\t" or unicodedata.category(ch)[0] != "C"
    )


def escape_command(text="", escape_chars="*"):
    """Backslash-escape characters the remote shell would expand"""
    for ch in escape_chars:
        text = text.replace(ch, "\\" + ch)
    return text


def extract_output(captured="", sent="", command="", strip_colors=True):
    """Pull the device's response out of everything read up to and including the prompt

    The final non-blank line is the prompt.  Everything up to the last copy
    of the sent command line is echo (which may wrap over several lines on
    narrow terminals).  If the device prints the command text itself, only
    the output after its last copy is kept.
    """
    if strip_colors:
        captured = strip_text_colors(captured)

    lines = list()
    for line in captured.splitlines():
        line = strip_control_chars(line)
        if line.strip() != "":
            lines.append(line)

    # Drop the trailing prompt
    text = "\n".join(lines[:-1])

    if sent != "" and sent in text:
        text = text.split(sent)[-1]
    elif command != "" and command in text:
        text = text.split(command)[-1]

    return text.strip()


def parse_template(template="", text=""):
    """Run a TextFSM template (path or template text) against text; return a list of dicts"""
    if os.path.isfile(os.path.expanduser(template)):
        # open the textfsm template from disk...
        with open(os.path.expanduser(template), "r", encoding="utf-8") as fh:
            fsm = TextFSM(fh)
    else:
        # build a fake filehandle around textfsm template string
        fsm = TextFSM(StringIO(template))

    return [dict(zip(fsm.header, row)) for row in fsm.ParseText(text)]


class CommandExecutor(object):
    """Send one command at a time and scrape its output"""

    def __init__(self, config=None, matcher=None, auth=None, eventlog=None):
        assert config is not None
        self.config = config
        self.catalog = catalog_for(config)
        self.matcher = matcher or PromptMatcher(debug=config.debug)
        self.eventlog = eventlog or JsonEventLog()
        self.auth = auth or AuthenticationStateMachine(
            config=config, matcher=self.matcher, eventlog=self.eventlog
        )

        if self.config.template != "":
            # Fail on a broken template before any host is touched
            parse_template(self.config.template, "")

    def execute(self, session, command_text="", password=""):
        """Run command_text on a READY session and return a CommandResult"""
        if session.state != "READY":
            raise SessionNotReady(
                "host:{} is {}; cannot run '{}'".format(session.host, session.state, command_text)
            )

        command = Command(command_text, self.catalog)
        host = session.host
        self.eventlog.entry(host=host, cmd=command.text, action="execute")

        if session.out_of_sync and not self.resync(session):
            return CommandResult(host, command.text, None, CommandStatus.DISCONNECTED)

        if command.is_elevation_request:
            logger.debug("host:{} routing '{}' to enable()".format(host, command.text))
            self.auth.enable(session, password)
            if session.state != "READY":
                return CommandResult(host, command.text, None, CommandStatus.DISCONNECTED)
            return CommandResult(host, command.text, None, CommandStatus.EMPTY)

        sent = escape_command(command.text, self.config.escape_chars)
        if command.is_sudo_request:
            match = self.auth.sudo(session, sent, password)
        else:
            session.sendline(sent)
            match = self.matcher.wait(
                session, self.catalog.ready_patterns(), self.config.command_timeout
            )

        if match.event == PromptEvent.TIMEOUT:
            logger.warning(
                "host:{} '{}' timed out after {}s".format(host, command.text, self.config.command_timeout)
            )
            self.eventlog.entry(host=host, cmd=command.text, action="output", timeout=True)
            session.out_of_sync = True
            return CommandResult(host, command.text, None, CommandStatus.TIMED_OUT)

        elif match.event == PromptEvent.END_OF_STREAM:
            session.failure = "connection closed while running '{}'".format(command.text)
            session._go_FAILED()
            logger.warning("host:{} {}".format(host, session.failure))
            self.eventlog.entry(host=host, cmd=command.text, action="output",
                result=session.failure)
            return CommandResult(host, command.text, None, CommandStatus.DISCONNECTED)

        output = extract_output(
            match.before + match.after,
            sent=sent,
            command=command.text,
            strip_colors=self.config.strip_colors,
        )
        self.eventlog.entry(host=host, cmd=command.text, action="output", result=output)

        if output == "":
            return CommandResult(host, command.text, None, CommandStatus.EMPTY)

        parsed = None
        if self.config.template != "":
            parsed = parse_template(self.config.template, output)
            if len(parsed) == 0:
                logger.warning(
                    "host:{} template matched nothing in '{}' output".format(host, command.text)
                )
        return CommandResult(host, command.text, output, CommandStatus.OK, parsed)

    def resync(self, session):
        """Throw away late output from a timed-out command; False if the session died

        Waits (up to command_timeout) for the prompt that ends the late
        output, then drops everything read so far.
        """
        match = self.matcher.wait(
            session, self.catalog.ready_patterns(), self.config.command_timeout
        )
        stale = match.before + match.after + session.take_pending()
        session.out_of_sync = False

        if match.event == PromptEvent.END_OF_STREAM:
            session.failure = "connection closed while waiting for late output"
            session._go_FAILED()
            logger.warning("host:{} {}".format(session.host, session.failure))
            return False

        if match.event == PromptEvent.TIMEOUT:
            logger.warning("host:{} no prompt after the last timeout; continuing".format(session.host))
        else:
            logger.debug("host:{} discarded {} characters of late output".format(
                session.host, len(stale))
            )
        return True
