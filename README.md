# esshell

Building blocks for an extensible shell in which programs, functions and
closures are all values. Each module can be used on its own:

| Module | What it provides |
| --- | --- |
| `esshell.errors` | `EsError`, an exception holding a list of words, and `fail(origin, message)`, which raises `EsError(["error", origin, message])` |
| `esshell.term` | `Term` (a string or a `Closure`), `mkstr()`, `term_cat()`, `make_list()` |
| `esshell.status` | `is_true()`, `exit_status()`, `make_status()` and `status_message()` for wait statuses |
| `esshell.util` | `is_absolute()`, `streq2()`, `strerror()` and the `VERSION` string |
| `esshell.openfile` | `OpenKind` and `open_file()` for the six redirection open modes |
| `esshell.signals` | `signal_number()`, `signal_name()`, `signal_message()`, `is_silent_signal()`, `SigEffect` and `SignalState`, which records caught signals and delivers them as `EsError` from `check()` |
| `esshell.match` | wildcard matching with `*`, `?` and `[...]` classes (`~` negates): `match()`, `list_match()`, `extract_matches()`, `has_wild()` |
| `esshell.split` | field splitting: `Splitter` (fed in pieces) and `fsplit()` |
| `esshell.printfmt` | a `printf`-like `Formatter` whose conversions can be replaced with `install()`, plus `sprint()` and `fprint()` |
| `esshell.tree` | parse-tree nodes: `NodeKind`, `Tree`, `mk()` |
| `esshell.syntax` | tree rewriting for sequences, pipelines, redirections, function definitions and `match` |
| `esshell.lexer` | the tokenizer: `Lexer`, `Token`, `TokenKind`, `tokenize()` |
| `esshell.variables` | `Variables` (global definitions, `push()` as a context manager, export to `name=value` strings), `Binding` and `validate_var()` |
| `esshell.opt` | `OptionParser`, a single-letter option scanner |
| `esshell.proc` | `ProcessTable`, which forks, records and waits for child processes |

There are no third-party dependencies; Python 3.10 or later is enough.

## Examples

Tokenizing a command line:

```python
from esshell.lexer import tokenize

for token in tokenize("echo hello | wc -l\n"):
    print(token.kind, token.value)
```

Statuses:

```python
from esshell.status import make_status, is_true, exit_status
from esshell.term import mkstr

make_status(0)                     # "0"
is_true([mkstr("0"), mkstr("")])   # True
exit_status([mkstr("3")])          # 3
```

Wildcards and extraction of the matched parts:

```python
from esshell.match import match, extract_matches, UNQUOTED

match("hello.c", "*.[ch]")                                  # True
extract_matches(["foo.c"], ["*.?"], [UNQUOTED])             # terms "foo", "c"
```

Formatting and splitting:

```python
from esshell.printfmt import sprint
from esshell.split import fsplit

sprint("%-8s\t%d", "cputime", 60)
fsplit(":", ["/bin:/usr/bin"], True)   # terms "/bin", "/usr/bin"
```

Variables with a temporary value:

```python
from esshell.term import make_list
from esshell.variables import Variables

env = Variables()
env.define("path", make_list("/bin", "/usr/bin"))
with env.push("path", make_list("/opt/bin")):
    env.lookup("path")        # the pushed value
env.environment()             # ["path=/bin\x0f/usr/bin"]
```

Errors from every component are raised as `esshell.errors.EsError`; for
those made by `fail()`, `kind` is `"error"` and `arguments` holds the origin
and the message.

## What the package does not do

It is a set of components, not a running shell. There is no command to
start, no grammar that turns tokens into trees (the lexer and the rewriting
functions in `esshell.syntax` are the pieces such a grammar would call), no
evaluator, and no table of built-in commands such as `echo`, `cd` or
`umask`. Settor functions on variables run only if `Variables` is given an
`evaluate` callable.