from collections import namedtuple
import time
import re

from rich import print as rich_print

from salvo.config import Platform
from salvo.errors import EndOfStream

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


class PromptEvent(object):
    """Outcome of a single PromptMatcher.wait() call"""

    CREDENTIAL_PROMPT = "credential_prompt"
    READY_PROMPT = "ready_prompt"
    END_OF_STREAM = "end_of_stream"
    TIMEOUT = "timeout"


# `before` is the text read ahead of the match, `after` is the matched text
# and `index` is the position of the matching pattern (-1 for EOF / TIMEOUT)
PromptMatch = namedtuple("PromptMatch", ["event", "before", "after", "index"])

PASSWORD_PROMPT = re.compile(r"[Pp]assword[^\r\n]{0,20}?:\s*$")
USERNAME_PROMPT = re.compile(r"(?:[Uu]ser\s?[Nn]ame|[Ll]ogin)\s*:\s*$")

####### WARNING #######################################################
#   Router prompts come as 'r1>', 'r1#', 'r1(config-if)#' and the
#   CatOS flavor 'Console> (enable) '.  The hostname must start a line
#   and the prompt must end the buffer, otherwise a '#' or '>' inside
#   command output would look like a prompt.
#######################################################################
ROUTER_READY_PROMPT = re.compile(
    r"(?:^|[\r\n])[\w.\-/@:]+(?:\([\w.\-/: ]+\))?\s?[>#]\s*(?:\(enable\)\s*)?$"
)
UNIX_READY_PROMPT = re.compile(r"[$#] $")

# Unable to negotiate with 172.16.1.3 port 22: no matching cipher found. Their offer: aes128-cbc,3des-cbc
# no matching key exchange method found. Their offer: diffie-hellman-group14-sha1
NEGOTIATION_ERRORS = (
    ("ciphers", re.compile(r"no\s+matching\s+cipher\s+found.+?offer:\s+(\S+)")),
    (
        "kex",
        re.compile(r"no\s+matching\s+key\s+exchange\s+method\s+found.+?offer:\s+(\S+)"),
    ),
)

HOST_KEY_WARNINGS = (
    re.compile(r"Permanently\s+added\s+\S+.*?to\s+the\s+list\s+of\s+known\s+hosts"),
    re.compile(r"REMOTE\s+HOST\s+IDENTIFICATION\s+HAS\s+CHANGED"),
    re.compile(r"Host\s+key\s+verification\s+failed"),
)


class PromptCatalog(object):
    """Prompt patterns for one platform; pure data, no scanning logic"""

    def __init__(
        self,
        name="",
        ready=None,
        password=PASSWORD_PROMPT,
        username=USERNAME_PROMPT,
        elevation_keyword="",
        sudo_keyword="",
    ):
        assert name in Platform.ALL
        assert isinstance(ready, re.Pattern)
        self.name = name
        self.ready = ready
        self.password = password
        self.username = username
        self.elevation_keyword = elevation_keyword
        self.sudo_keyword = sudo_keyword

    def __repr__(self):
        return """<PromptCatalog {}>""".format(self.name)

    def login_patterns(self):
        """Patterns for password authentication and privilege elevation"""
        return (
            (PromptEvent.CREDENTIAL_PROMPT, self.password),
            (PromptEvent.READY_PROMPT, self.ready),
        )

    def legacy_login_patterns(self):
        """Patterns for the telnet username step; index 0 is the username prompt"""
        return (
            (PromptEvent.CREDENTIAL_PROMPT, self.username),
            (PromptEvent.CREDENTIAL_PROMPT, self.password),
            (PromptEvent.READY_PROMPT, self.ready),
        )

    def ready_patterns(self):
        return ((PromptEvent.READY_PROMPT, self.ready),)


CATALOG = {
    Platform.ROUTER_CLI: PromptCatalog(
        name=Platform.ROUTER_CLI,
        ready=ROUTER_READY_PROMPT,
        elevation_keyword="enable",
    ),
    Platform.UNIX_SHELL: PromptCatalog(
        name=Platform.UNIX_SHELL,
        ready=UNIX_READY_PROMPT,
        sudo_keyword="sudo",
    ),
}


def catalog_for(config):
    return CATALOG[config.platform]


class PromptMatcher(object):
    """Scan a session's incoming text for the earliest matching prompt"""

    def __init__(self, debug=0):
        self.debug = debug

    def wait(self, session, patterns, timeout):
        """Wait up to `timeout` seconds for one of `patterns` and return a PromptMatch

        `patterns` is a sequence of (PromptEvent, compiled regex) pairs.  When
        several patterns match, the one starting earliest in the stream wins;
        ties go to the earlier pattern.  Text after the match is left in the
        session for the next call.
        """
        assert len(patterns) > 0
        assert timeout > 0

        deadline = time.monotonic() + timeout
        buf = session.take_pending()

        while True:
            best = None
            for index, (event, regex) in enumerate(patterns):
                mm = regex.search(buf)
                if mm is None:
                    continue
                if best is None or mm.start() < best[2].start():
                    best = (index, event, mm)

            if best is not None:
                index, event, mm = best
                session.unread(buf[mm.end():])
                if self.debug:
                    rich_print(
                        "    [bold blue]wait() matched {} with pattern {}: {}[/bold blue]".format(
                            event, index, repr(mm.group(0))
                        )
                    )
                return PromptMatch(event, buf[: mm.start()], mm.group(0), index)

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                # Keep what we read so a later wait() can still see it
                session.unread(buf)
                if self.debug:
                    rich_print("    [bold red]wait() TIMEOUT after {}s[/bold red]".format(timeout))
                return PromptMatch(PromptEvent.TIMEOUT, buf, "", -1)

            try:
                buf += session.receive(remaining)
            except EndOfStream:
                if self.debug:
                    rich_print("    [bold red]wait() EOF while waiting for prompts[/bold red]")
                return PromptMatch(PromptEvent.END_OF_STREAM, buf, "", -1)
