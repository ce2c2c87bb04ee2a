"""Signal names, signal effects and deferred delivery of signals as exceptions."""

from __future__ import annotations

import enum
import signal
import sys
from typing import Iterable, Mapping, Optional, Union

from esshell.errors import EsError
from esshell.term import Term, make_list, mkstr

NSIG = signal.NSIG

_BY_NAME = {
    name.lower(): int(value) for name, value in signal.Signals.__members__.items()
}


class SigEffect(enum.Enum):
    """What the shell does when a signal arrives."""

    NOCHANGE = "nochange"
    CATCH = "catch"
    DEFAULT = "default"
    IGNORE = "ignore"
    NOOP = "noop"
    SPECIAL = "special"


_PREFIX = {
    SigEffect.CATCH: "",
    SigEffect.IGNORE: "-",
    SigEffect.NOOP: "/",
    SigEffect.SPECIAL: ".",
}


def signal_number(name: str) -> Optional[int]:
    """The number of a signal named like ``sigint`` or ``sig2``, or None."""
    if not name.startswith("sig"):
        return None
    if name in _BY_NAME:
        return _BY_NAME[name]
    try:
        number = int(name[3:], 10)
    except ValueError:
        return None
    if 0 < number < NSIG:
        return number
    return None


def signal_name(sig: int) -> str:
    """The shell's name for a signal number."""
    try:
        return signal.Signals(sig).name.lower()
    except ValueError:
        return f"sig{sig}"


def signal_message(sig: int) -> str:
    """The description of a signal."""
    try:
        message = signal.strsignal(sig)
    except ValueError:
        message = None
    return message if message is not None else f"unknown signal {sig}"


def _word(item: Union[Term, str]) -> Optional[str]:
    if isinstance(item, str):
        return item
    return None if item.is_closure() else item.text


def is_silent_signal(exception: Iterable[Union[Term, str]]) -> bool:
    """True for the exception ``signal sigint``, which is reported silently."""
    words = list(exception)
    return (
        len(words) >= 2
        and _word(words[0]) == "signal"
        and _word(words[1]) == "sigint"
    )


def _report(message: str) -> None:
    sys.stderr.write(message)
    sys.stderr.flush()


class SignalState:
    """The effect of every signal and the signals caught but not yet delivered."""

    def __init__(self, install: bool = True) -> None:
        self._install = install
        self._effects = {sig: SigEffect.DEFAULT for sig in range(1, NSIG)}
        self._caught: set[int] = set()
        self._blocked = 0
        self.interrupted = False
        self.sigint_newline = True
        if install:
            for sig in signal.valid_signals():
                if not 0 < sig < NSIG:
                    continue
                try:
                    handler = signal.getsignal(sig)
                except (OSError, ValueError):
                    continue
                if handler == signal.SIG_IGN:
                    self._effects[sig] = SigEffect.IGNORE

    def _handler(self, signum: int, frame: object) -> None:
        self.catch(signum)

    def _set_handler(self, sig: int, handler: object) -> bool:
        if not self._install:
            return True
        try:
            signal.signal(sig, handler)
        except (OSError, ValueError, RuntimeError):
            return False
        return True

    def initialize(self, interactive: bool, allow_dumps: bool) -> None:
        """Set the effects a shell starts with."""
        if interactive or self._effects[signal.SIGINT] is SigEffect.DEFAULT:
            self.set_effect(signal.SIGINT, SigEffect.SPECIAL)
        if not allow_dumps:
            if interactive:
                self.set_effect(signal.SIGTERM, SigEffect.NOOP)
            if interactive or self._effects[signal.SIGQUIT] is SigEffect.DEFAULT:
                self.set_effect(signal.SIGQUIT, SigEffect.NOOP)

    def set_effect(self, sig: int, effect: SigEffect) -> SigEffect:
        """Change the effect of a signal and return the previous one."""
        if not 0 < sig < NSIG:
            raise ValueError(f"bad signal number: {sig}")
        old = self._effects[sig]
        if effect is SigEffect.NOCHANGE or effect is old:
            return old
        if effect is SigEffect.IGNORE:
            if not self._set_handler(sig, signal.SIG_IGN):
                _report(f"$&setsignals: cannot ignore {signal_name(sig)}\n")
                return old
        elif effect in (SigEffect.SPECIAL, SigEffect.CATCH, SigEffect.NOOP):
            if effect is SigEffect.SPECIAL and sig != signal.SIGINT:
                _report(
                    f"$&setsignals: special handler not defined for {signal_name(sig)}\n"
                )
                return old
            if not self._set_handler(sig, self._handler):
                _report(f"$&setsignals: cannot catch {signal_name(sig)}\n")
                return old
        elif effect is SigEffect.DEFAULT:
            self._set_handler(sig, signal.SIG_DFL)
        self._effects[sig] = effect
        return old

    def set_effects(self, effects: Mapping[int, SigEffect]) -> None:
        """Set every signal's effect; signals not mentioned get the default."""
        for sig in range(1, NSIG):
            self.set_effect(sig, effects.get(sig, SigEffect.DEFAULT))

    def effects(self) -> dict[int, SigEffect]:
        """A copy of the current effects, by signal number."""
        return dict(self._effects)

    def signal_list(self) -> list[Term]:
        """The words describing every signal whose effect is not the default."""
        return [
            mkstr(_PREFIX[effect] + signal_name(sig))
            for sig, effect in sorted(self._effects.items())
            if effect is not SigEffect.DEFAULT
        ]

    def block(self) -> None:
        """Stop delivering signals as exceptions."""
        self._blocked += 1

    def unblock(self) -> None:
        """Resume delivering signals as exceptions."""
        if self._blocked <= 0:
            raise RuntimeError("signals are not blocked")
        self._blocked -= 1

    def catch(self, sig: int) -> None:
        """Record that a signal arrived; it is delivered by ``check``."""
        if not 0 <= sig < NSIG:
            raise ValueError(f"bad signal number: {sig}")
        self._caught.add(sig)
        self.interrupted = True

    def check(self) -> None:
        """Deliver the lowest pending signal as an exception, if its effect says so."""
        if not self._caught or self._blocked:
            return
        sig = min(self._caught)
        self._caught.discard(sig)
        exception = EsError(make_list("signal", signal_name(sig)))
        effect = self._effects.get(sig, SigEffect.DEFAULT)
        if effect is SigEffect.CATCH:
            raise exception
        if effect is SigEffect.SPECIAL:
            if self.sigint_newline:
                _report("\n")
            self.sigint_newline = True
            raise exception

    def reset_to_defaults(self) -> None:
        """Return every caught signal to its default effect."""
        for sig, effect in list(self._effects.items()):
            if effect in (SigEffect.CATCH, SigEffect.NOOP, SigEffect.SPECIAL):
                self.set_effect(sig, SigEffect.DEFAULT)