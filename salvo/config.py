import os

from traits.api import (
    Str,
    Bool,
    Int,
    File,
    Range,
    PrefixList,
    HasRequiredTraits,
)

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


class Platform(object):
    """Device families with a prompt catalog entry"""

    ROUTER_CLI = "router_cli"
    UNIX_SHELL = "unix_shell"
    ALL = (ROUTER_CLI, UNIX_SHELL)


class TransportKind(object):
    """Result of probing a host's remote-shell ports"""

    SECURE = "secure"
    LEGACY = "legacy"
    NONE = "none"


class HostKeyPolicy(object):
    WARN = "warn"
    STRICT = "strict"
    DISABLE = "disable"
    ALL = (WARN, STRICT, DISABLE)


class RunConfig(HasRequiredTraits):
    """Run-wide settings, built once and handed to every component"""

    platform = PrefixList(list(Platform.ALL), default_value=Platform.ROUTER_CLI)
    command_file = File(value="", required=False)

    secure_port = Range(low=1, high=65535, value=22)
    legacy_port = Range(low=1, high=65535, value=23)

    probe_timeout = Range(low=0.1, high=30.0, value=2.0)
    login_timeout = Range(low=0.1, high=300.0, value=10.0)
    command_timeout = Range(low=0.1, high=3600.0, value=30.0)
    ping_timeout = Range(low=1, high=30, value=3)
    max_password_attempts = Range(low=1, high=10, value=3)

    host_key_policy = PrefixList(list(HostKeyPolicy.ALL), default_value=HostKeyPolicy.WARN)
    ssh_key = File(value="", required=False)
    ssh_keepalive = Range(low=0, high=3600, value=60)

    # Characters the remote shell could expand; each is backslash-escaped
    escape_chars = Str("*")
    encoding = PrefixList(["utf-8", "latin-1"], default_value="utf-8")
    strip_colors = Bool(True)

    log_file = File(value="", required=False)
    log_screen = Bool(False)
    json_logfile = File(value="", required=False)
    template = Str("")

    debug = Int(0)

    def __init__(self, **kwargs):
        HasRequiredTraits.__init__(self, **kwargs)

        if self.secure_port == self.legacy_port:
            raise ValueError(
                "secure_port and legacy_port must differ, both are {}".format(
                    self.secure_port
                )
            )
        if self.ssh_key != "":
            self.ssh_key = os.path.expanduser(self.ssh_key)

    def __repr__(self):
        return """<RunConfig platform:{} secure_port:{} legacy_port:{} host_key_policy:{}>""".format(
            self.platform, self.secure_port, self.legacy_port, self.host_key_policy
        )
