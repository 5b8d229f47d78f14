from collections import namedtuple

import arrow

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


class CommandStatus(object):
    OK = "ok"
    EMPTY = "empty"
    TIMED_OUT = "timed_out"
    DISCONNECTED = "disconnected"


CommandResult = namedtuple(
    "CommandResult", ["host", "command", "output", "status", "parsed"], defaults=(None,)
)


class Command(object):
    """One line of text to run on every host"""

    def __init__(self, text="", catalog=None):
        assert catalog is not None
        self.text = text.strip()
        self.catalog = catalog

    def __repr__(self):
        return """<Command '{}'>""".format(self.text)

    @property
    def is_elevation_request(self):
        # FIXME 'end', 'en' or anything else sharing the first two
        #     characters of 'enable' lands here too; kept as-is until
        #     someone decides to require the whole keyword
        keyword = self.catalog.elevation_keyword
        if keyword == "" or self.text == "":
            return False
        return self.text[0:2] == keyword[0:2]

    @property
    def is_sudo_request(self):
        keyword = self.catalog.sudo_keyword
        if keyword == "" or self.text == "":
            return False
        return self.text.split()[0] == keyword


class HostOutcome(object):
    """What happened on one host; results are frozen by finish()"""

    def __init__(self, host=""):
        self.host = host
        self.transport = None
        self.reached = False
        self.authenticated = False
        self.results = list()
        self.error = None
        self.diagnosis = ""
        self.started = arrow.now()
        self.finished = None

    def __repr__(self):
        return """<HostOutcome host:{} reached:{} authenticated:{} results:{}>""".format(
            self.host, self.reached, self.authenticated, len(self.results)
        )

    def add_result(self, result):
        assert self.finished is None, "HostOutcome for {} is finished".format(self.host)
        assert isinstance(result, CommandResult)
        self.results.append(result)

    def finish(self):
        self.results = tuple(self.results)
        self.finished = arrow.now()
        return self

    @property
    def elapsed(self):
        if self.finished is None:
            return None
        return (self.finished - self.started).total_seconds()
