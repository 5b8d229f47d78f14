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


class SalvoError(Exception):
    """Base class for salvo errors"""

    def __init__(self, error=""):
        super(SalvoError, self).__init__(error)


class TransportUnavailable(SalvoError):
    """Neither the secure nor the legacy shell port answered"""

    def __init__(self, error=""):
        super(TransportUnavailable, self).__init__(error)


class SpawnFailure(SalvoError):
    """The ssh or telnet client could not be started"""

    def __init__(self, error=""):
        super(SpawnFailure, self).__init__(error)


class AuthenticationFailure(SalvoError):
    """Login was rejected, timed out or the connection dropped during login"""

    def __init__(self, error=""):
        super(AuthenticationFailure, self).__init__(error)


class SessionNotReady(SalvoError):
    """A command was issued against a session that has not logged in"""

    def __init__(self, error=""):
        super(SessionNotReady, self).__init__(error)


class SessionClosed(SalvoError):
    """Text was sent on a failed or closed session"""

    def __init__(self, error=""):
        super(SessionClosed, self).__init__(error)


class EndOfStream(SalvoError):
    """The remote side closed the connection"""

    def __init__(self, error=""):
        super(EndOfStream, self).__init__(error)
