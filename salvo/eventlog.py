import atexit
import json
import os

from loguru import logger
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

EVENT_ACTIONS = frozenset(["probe", "login", "enable", "execute", "output", "close"])


class JsonEventLog(object):
    """Append one JSON object per line for every session action

    Passwords are never handed to this class.
    """

    def __init__(self, json_logfile=""):
        self.json_logfile = os.path.expanduser(json_logfile)
        self.jh = None
        if self.json_logfile != "":
            self.open()

    def __repr__(self):
        return """<JsonEventLog: {}>""".format(self.json_logfile or "disabled")

    def open(self):
        self.jh = open(self.json_logfile, "a", encoding="utf-8")
        atexit.register(self.close)
        logger.debug("writing session events to {}".format(self.json_logfile))
        return True

    def close(self):
        if self.jh is None:
            return None
        self.jh.flush()
        self.jh.close()
        self.jh = None
        return True

    def entry(self, host="", cmd="", action="", result=None, timeout=False):
        assert action in EVENT_ACTIONS
        assert isinstance(result, str) or (result is None)
        assert isinstance(timeout, bool)
        if self.jh is None:
            return None
        self.jh.write(
            json.dumps(
                {
                    "time": str(arrow.now()),
                    "host": host,
                    "cmd": cmd,
                    "action": action,
                    "result": result,
                    "timeout": timeout,
                },
                sort_keys=True,
            )
            + os.linesep
        )
        self.jh.flush()
        return True
