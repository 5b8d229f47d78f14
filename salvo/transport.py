from contextlib import closing
import socket

from loguru import logger
import pexpect as px

from salvo.config import TransportKind

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


def port_open(host="", port=22, timeout=2.0):
    """Return True if a TCP connection to host:port completes within timeout"""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as proto_sock:
        proto_sock.settimeout(timeout)
        try:
            return proto_sock.connect_ex((host, port)) == 0
        except socket.gaierror:
            logger.warning("cannot resolve host:{}".format(host))
            return False
        except OSError:
            return False


class TransportProber(object):
    """Pick ssh or telnet for a host by probing their well-known ports"""

    def __init__(self, config=None):
        assert config is not None
        self.config = config

    def probe(self, host=""):
        """Return TransportKind.SECURE, LEGACY or NONE; never raises"""
        config = self.config
        secure = port_open(host, config.secure_port, config.probe_timeout)
        legacy = port_open(host, config.legacy_port, config.probe_timeout)
        logger.debug(
            "host:{} port {} open={}, port {} open={}".format(
                host, config.secure_port, secure, config.legacy_port, legacy
            )
        )

        if secure:
            return TransportKind.SECURE
        elif legacy:
            return TransportKind.LEGACY
        return TransportKind.NONE

    def is_alive(self, host=""):
        """Return True if host answers a single ICMP echo"""
        timeout = self.config.ping_timeout
        try:
            _, exitstatus = px.run(
                "ping -c 1 -W {} {}".format(timeout, host),
                timeout=timeout + 2,
                withexitstatus=True,
            )
        except px.exceptions.ExceptionPexpect as ee:
            logger.warning("cannot run ping: {}".format(ee))
            return False
        return exitstatus == 0
