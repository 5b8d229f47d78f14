from loguru import logger

from salvo.eventlog import JsonEventLog
from salvo.prompts import (
    PromptMatcher,
    PromptMatch,
    PromptEvent,
    NEGOTIATION_ERRORS,
    HOST_KEY_WARNINGS,
    catalog_for,
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


class AuthenticationStateMachine(object):
    """Log in, elevate privileges and answer sudo prompts on a RemoteSession"""

    def __init__(self, config=None, matcher=None, eventlog=None):
        assert config is not None
        self.config = config
        self.catalog = catalog_for(config)
        self.matcher = matcher or PromptMatcher(debug=config.debug)
        self.eventlog = eventlog or JsonEventLog()

    def login(self, session, password):
        """Drive the session to a ready prompt; return True on success

        Every password prompt is answered with `password`.  End of stream
        after a password prompt means the credentials were rejected, since
        vendors disagree on how (or whether) they print 'access denied'.
        """
        assert session.state in ("CONNECTING", "AWAITING_CREDENTIALS")

        patterns = self.catalog.login_patterns()
        credential_prompts = 0
        while True:
            match = self.matcher.wait(session, patterns, self.config.login_timeout)
            self.check_host_key(session, match.before)
            logger.debug("host:{} login saw {}".format(session.host, match.event))

            if match.event == PromptEvent.CREDENTIAL_PROMPT:
                credential_prompts += 1
                if credential_prompts > self.config.max_password_attempts:
                    return self.login_failed(
                        session,
                        "password rejected {} times".format(credential_prompts - 1),
                    )
                session._go_AWAITING_CREDENTIALS()
                session.sendline(password)

            elif match.event == PromptEvent.READY_PROMPT:
                session._go_READY()
                self.eventlog.entry(host=session.host, cmd=session.transport,
                    action="login", result="ready")
                logger.info("host:{} login succeeded".format(session.host))
                return True

            elif match.event == PromptEvent.END_OF_STREAM:
                if credential_prompts > 0:
                    return self.login_failed(
                        session, "connection closed after the password was sent"
                    )
                if self.check_negotiation(session, match.before):
                    return self.login_failed(
                        session, "ssh algorithm negotiation failed"
                    )
                return self.login_failed(
                    session, "connection closed before any login prompt"
                )

            else:
                return self.login_failed(
                    session, "timed out after {}s waiting for a prompt".format(
                        self.config.login_timeout
                    )
                )

    def login_failed(self, session, reason):
        session.failure = reason
        session._go_FAILED()
        self.eventlog.entry(host=session.host, cmd=session.transport,
            action="login", result=reason)
        logger.warning("host:{} login failed: {}".format(session.host, reason))
        return False

    def enable(self, session, password):
        """Request privileged mode; best effort, nothing is reported back"""
        assert session.state == "READY"

        keyword = self.catalog.elevation_keyword or "enable"
        session.sendline(keyword)
        self.eventlog.entry(host=session.host, cmd=keyword, action="enable")

        patterns = self.catalog.login_patterns()
        credential_prompts = 0
        while True:
            match = self.matcher.wait(session, patterns, self.config.login_timeout)

            if match.event == PromptEvent.CREDENTIAL_PROMPT:
                credential_prompts += 1
                if credential_prompts > self.config.max_password_attempts:
                    break
                session.sendline(password)

            elif match.event == PromptEvent.READY_PROMPT:
                logger.debug("host:{} returned a prompt after '{}'".format(session.host, keyword))
                return None

            elif match.event == PromptEvent.END_OF_STREAM:
                # Not an elevation failure, but nothing more can be sent
                session.failure = "connection closed during '{}'".format(keyword)
                session._go_FAILED()
                logger.warning("host:{} {}".format(session.host, session.failure))
                return None

            else:
                break

        logger.warning("host:{} could not confirm privileged mode".format(session.host))
        return None

    def sudo(self, session, line, password):
        """Send a sudo command line, answering one password prompt; return a PromptMatch

        The returned `before` holds everything the host printed, including
        the password prompt, so the caller can extract the command output.
        """
        assert session.state == "READY"
        session.sendline(line)

        timeout = self.config.command_timeout
        match = self.matcher.wait(session, self.catalog.login_patterns(), timeout)
        if match.event != PromptEvent.CREDENTIAL_PROMPT:
            return match

        # '[sudo] password for mpenning: '
        session.sendline(password)
        seen = match.before + match.after
        match = self.matcher.wait(session, self.catalog.ready_patterns(), timeout)
        return PromptMatch(match.event, seen + match.before, match.after, match.index)

    def check_host_key(self, session, text):
        for regex in HOST_KEY_WARNINGS:
            mm = regex.search(text)
            if mm is not None:
                logger.warning("host:{} ssh reported '{}'".format(session.host, mm.group(0)))

    def check_negotiation(self, session, text):
        """Record ssh ciphers / key exchanges a legacy server offered; True if any"""
        for name, regex in NEGOTIATION_ERRORS:
            mm = regex.search(text)
            if mm is not None:
                session.offered_algorithms[name] = mm.group(1).strip()
                logger.info(
                    "host:{} offered {}={}".format(session.host, name, mm.group(1).strip())
                )
        return len(session.offered_algorithms) > 0
