# liquid

Building blocks for the Liquid template language, in pure Python:

- **Template scanning**: `liquid.scanner.scan` splits template source into text,
  object (`{{ … }}`), tag (`{% … %}`) and whitespace-trim tokens, with
  configurable delimiters.
- **Block parsing**: `liquid.template_parser.ParserConfig` turns tokens into an
  abstract syntax tree (`ASTSeq`, `ASTBlock`, `ASTTag`, `ASTText`, `ASTObject`,
  `ASTRaw`, `ASTTrim`), matching nested blocks according to a `Grammar` that you
  supply.
- **Expressions**: `liquid.expr_parser` parses the expression language used inside
  objects and tags (`a.b[c]`, `x | upcase`, `1 < 2 and y contains "z"`, ranges
  such as `(1..5)`), as well as the `assign`, `cycle`, loop and `when` statement
  forms (`parse_statement`).
- **Filters**: `liquid.filters.add_standard_filters` registers the standard
  Liquid filters (`default`, `join`, `split`, `map`, `sort`, `sort_natural`,
  `uniq`, `date`, `plus`, `divided_by`, `round`, `truncate`, `escape`,
  `url_encode`, and many more).
- **Drops**: objects that present themselves to templates through a
  `to_liquid()` method; see `liquid.drops.Drop` and `liquid.drops.from_drop`.

## Installation

```
pip install .
```

Python 3.10 or later is required. The only runtime dependency is
`python-dateutil`, used by the `date` filter to read date strings.

## Evaluating expressions

```python
from liquid.evaluation import Config, Context
from liquid.expr_parser import evaluate_string
from liquid.filters import add_standard_filters

config = Config()
add_standard_filters(config)
context = Context({"hello": "hola", "fruits": ["apples", "plums"]}, config)

evaluate_string('hello | capitalize | append: " Mundo"', context)  # 'Hola Mundo'
evaluate_string("fruits | reverse | join: ', '", context)          # 'plums, apples'
evaluate_string('"seafood" contains "foo"', context)               # True
```

Errors are raised as exceptions: a malformed expression raises
`liquid.expr_parser.ExpressionSyntaxError`, an unknown filter raises
`liquid.evaluation.UndefinedFilter`, and a filter that fails (including one
given too many arguments) raises `liquid.evaluation.FilterError`.

### Custom filters

A filter is any callable taking the piped value first and any arguments after it:

```python
config.add_filter("shout", lambda s: s.upper() + "!")
evaluate_string('"hi" | shout', Context({}, config))  # 'HI!'
```

Type annotations on a filter's parameters (`str`, `int`, `float`, `list`) make
the arguments be converted before the call; a parameter annotated `Closure`
receives the argument string as an unevaluated expression
(`liquid.evaluation.Closure`, with `bind` and `evaluate`).

## Scanning templates

```python
from liquid.scanner import scan
from liquid.tokens import SourceLoc

tokens = scan("pre{% tag args %}mid{{ object }}post", SourceLoc(), None)
[t.type for t in tokens]
# [TokenType.TEXT, TokenType.TAG, TokenType.TEXT, TokenType.OBJ, TokenType.TEXT]
```

Pass four strings as `delims` (object left, object right, tag left, tag right)
to use delimiters other than `{{ }}` and `{% %}`; an empty string stands for the
default.

## Parsing templates

The parser knows nothing about particular tags: a `Grammar` tells it, for each
tag name, whether it is a block start, a clause, or a block end, or returns
`None` for a plain tag.

```python
from liquid.template_parser import ParserConfig

class BlockTag:
    def __init__(self, name): self.name = name
    def is_block(self): return True
    def is_block_start(self): return self.name == "if"
    def is_block_end(self): return self.name == "endif"
    def is_clause(self): return self.name == "else"
    def requires_parent(self): return self.name != "if"
    def can_have_parent(self, parent): return parent.tag_name() == "if"
    def parent_tags(self): return ["if"]
    def tag_name(self): return self.name

class IfGrammar:
    def block_syntax(self, name):
        return BlockTag(name) if name in ("if", "else", "endif") else None

root = ParserConfig(grammar=IfGrammar()).parse("{% if x %}yes{% else %}no{% endif %}")
block = root.children[0]  # ASTBlock for "if"; block.body and block.clauses hold the rest
```

Tags named `comment` and `raw`, when the grammar reports them as blocks, have
their contents skipped or kept verbatim in an `ASTRaw`. Template errors raise
`liquid.errors.SourceError`, which reports the path and line number of the
offending token.

## What this package does not do

It scans and parses templates and evaluates expressions, but it does not
render templates: there is no template engine, no standard tags such as `if`,
`for` or `include`, and no command-line tool.

## Running the tests

```
pip install ".[test]"
pytest
```