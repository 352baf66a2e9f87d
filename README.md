# azurite

This package has a static type checker and a small project-manifest tool for the
Azurite language.

The checker works on a syntax tree. It looks up names through nested scopes. It
infers and compares types and turns generic classes into concrete ones. It
checks function calls, method calls, array methods, and whether a `match` over
an enum covers every variant. It collects every type error it finds, so one run
reports all of them.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
azurite init [DIR]
azurite install NAME
azurite install NAME --git URL [--rev REV]
azurite install NAME --path PATH [--rev REV]
```

- `init` creates `DIR` if it does not exist. `DIR` defaults to `.`. The command
  writes a starter `azurite.toml` there with a `[package]` table and a
  `[dependencies]` table, then prints `Created <path>`. It fails if the
  directory already has an `azurite.toml`.
- `install` adds one line to the `[dependencies]` table of the nearest
  `azurite.toml`. It searches the current directory first and then each parent
  directory. If no manifest is found, it creates one in the current directory.
  - The registry knows these names: `string`, `math`, `random`, `color` and
    `system`. Any other name needs `--git` or `--path`.
  - `--rev` adds a `rev` key to the line.
  - The command refuses a name that is already listed.
  - On success it prints `Added '<name>' to <path>`.

When a command fails, `azurite` writes the message to standard error and exits
with status 1.

## Using the checker from Python

Build a `Program` from the nodes in `azurite.syntax` and pass it to
`Checker.check_program`. The method returns normally when the program
type-checks. Otherwise it raises `CheckFailed`, whose `errors` attribute lists
the `CheckError` values. Each `CheckError` has a `span` and a `message`.

```python
from azurite.checker import Checker, CheckFailed
from azurite.syntax import Ident, Let, Program, Span, StringLit, TypeName

span = Span(1, 2, 1, 1)
program = Program([
    Let(Ident("x", span=span), StringLit("hello"), TypeName("int")),
])

try:
    Checker().check_program(program)
except CheckFailed as failure:
    for error in failure.errors:
        print(error)   # type mismatch: expected 'int', got 'string'
```

A `Checker` keeps its declarations from one call to the next. It starts out
knowing the built-in functions, such as `print`, `len`, `sqrt`, `pow`, `input`
and `rand`.

The modules are:

- `azurite.types`: the checker's types (`Primitive`, `Instance`, `ArrayOf`,
  `FuncType`, `TupleOf`), the constants `INT`, `FLOAT`, `STRING`, `BOOL`,
  `NULL`, `VOID` and `ANY`, and `type_from_name`.
- `azurite.symbol`: `Symbol`, `SymbolKind` and `Scope`. `Scope.insert` raises
  `ScopeError` when a name is declared twice in the same scope.
- `azurite.syntax`: the expression, pattern, statement and type-annotation
  nodes, `BinOp`, `UnOp`, `Span` and `Program`.
- `azurite.expressions`, `azurite.statements` and `azurite.members`: the
  typing rules behind `check_expr`, `check_stmt`, `resolve_instance_field` and
  `resolve_instance_method`.
- `azurite.checker`: `Checker`, `CheckError` and `CheckFailed`.
- `azurite.cli`: `main`, `init_project`, `install_dependency`,
  `find_manifest`, `registry_url` and `complete_word`. `complete_word`
  completes keywords and built-in names.

## What this package does not do

- It has no lexer or parser. Programs must be given to the checker as syntax
  trees, not as source text.
- It does not generate code and cannot build executables.
- It does not fetch, clone or update dependencies. `install` only edits
  `azurite.toml`.
- The command line has no `check`, `build`, `update` or interactive prompt
  commands.