"""Shared helpers for building syntax trees against literal source text."""
from hstyle.core.syntax import NodeKind, Position, Span, SyntaxNode


class Tree:
    """
    Build SyntaxNodes by naming where they start and end in ``source``.

    Positions are given as ``(line, text)`` or ``(line, text, nth)``: the nth
    occurrence of ``text`` on that 1-based line. A node ends where its
    start text ends unless ``end`` names another token.
    """

    def __init__(self, source: str):
        self.source = source
        self.lines = source.split('\n')

    def find(self, where) -> tuple[int, int, str]:
        line, text, *rest = where
        nth = rest[0] if rest else 0
        column = -1
        for _ in range(nth + 1):
            column = self.lines[line - 1].index(text, column + 1)
        return line, column, text

    def span(self, start, end=None) -> Span:
        line, column, text = self.find(start)
        end_line, end_column, end_text = self.find(end) if end else (line, column, text)
        return Span(Position(line, column), Position(end_line, end_column + len(end_text)))

    def __call__(self, kind: NodeKind, start, *children: SyntaxNode, end=None) -> SyntaxNode:
        return SyntaxNode(kind, self.span(start, end), tuple(children))


K = NodeKind

CANONICAL = """\
-- | Geometry helpers.
module Shapes.Core
  ( Shape
  , area
  )
  where

import Shapes.Util

import Data.List

-- | A shape.
data Shape
     = Circle Double
     | Square Double
     deriving (Show)

-- | Area of a shape.
area :: Shape -> Double
area shape = case shape of
  Circle r -> pi * r * r
  Square s -> s * s

-- | Describe a size.
describe :: Double -> String
describe x =
  if big
     then "big"
     else "small"

  where
    big = x > 10
"""


def canonical_tree() -> SyntaxNode:
    """Tree for CANONICAL, a module every rule accepts."""
    t = Tree(CANONICAL)
    header = t(
        K.MODULE_HEADER, (1, "--"),
        t(K.EXPORT_LIST, (3, "("), t(K.ATOM, (3, "Shape")), t(K.ATOM, (4, "area")), end=(5, ")")),
        end=(6, "where"),
    )
    shape = t(
        K.DATA, (12, "--"),
        t(K.CONSTRUCTOR, (14, "Circle"), end=(14, "Double")),
        t(K.CONSTRUCTOR, (15, "Square"), end=(15, "Double")),
        t(K.DERIVING, (16, "deriving"), t(K.ATOM, (16, "Show")), end=(16, ")")),
        end=(16, ")"),
    )
    area = t(
        K.DECLARATION, (20, "area"),
        t(K.ATOM, (20, "area shape")),
        t(
            K.CASE, (20, "case"),
            t(K.ATOM, (20, "shape", 1)),
            t(K.ALTERNATIVE, (21, "Circle"),
              t(K.ATOM, (21, "Circle r")), t(K.ATOM, (21, "pi * r * r")), end=(21, "pi * r * r")),
            t(K.ALTERNATIVE, (22, "Square"),
              t(K.ATOM, (22, "Square s")), t(K.ATOM, (22, "s * s")), end=(22, "s * s")),
            end=(22, "s * s"),
        ),
        end=(22, "s * s"),
    )
    describe = t(
        K.DECLARATION, (26, "describe"),
        t(K.ATOM, (26, "describe x")),
        t(
            K.IF, (27, "if"),
            t(K.ATOM, (27, "big")), t(K.ATOM, (28, '"big"')), t(K.ATOM, (29, '"small"')),
            end=(29, '"small"'),
        ),
        t(
            K.WHERE_BLOCK, (31, "where"),
            t(K.DECLARATION, (32, "big"), t(K.ATOM, (32, "big")), t(K.ATOM, (32, "x > 10")),
              end=(32, "x > 10")),
            end=(32, "x > 10"),
        ),
        end=(32, "x > 10"),
    )
    return t(
        K.MODULE, (1, "--"),
        header,
        t(K.IMPORT, (8, "import"), end=(8, "Shapes.Util")),
        t(K.IMPORT, (10, "import"), end=(10, "Data.List")),
        shape,
        t(K.SIGNATURE, (18, "--"), end=(19, "Double")),
        area,
        t(K.SIGNATURE, (24, "--"), end=(25, "String")),
        describe,
        end=(32, "x > 10"),
    )


def module_of(*children: SyntaxNode) -> SyntaxNode:
    """Wrap top-level nodes in a module spanning exactly their extent."""
    span = Span(children[0].span.start, children[-1].span.end)
    return SyntaxNode(K.MODULE, span, children)


def _tabs():
    source = "main = do\n\tpure ()\n"
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "main"),
        t(K.ATOM, (1, "main")),
        t(K.DO_BLOCK, (1, "do"), t(K.ATOM, (2, "pure ()")), end=(2, "pure ()")),
        end=(2, "pure ()"),
    ))


def _long_line():
    source = (
        "result = someFunction argumentNumberOne argumentNumberTwo "
        "argumentNumberThree argumentNumberFour\n"
    )
    t = Tree(source)
    args = ["someFunction", "argumentNumberOne", "argumentNumberTwo",
            "argumentNumberThree", "argumentNumberFour"]
    return source, module_of(t(
        K.DECLARATION, (1, "result"),
        t(K.ATOM, (1, "result")),
        t(K.APPLICATION, (1, args[0]), *(t(K.ATOM, (1, a)) for a in args), end=(1, args[-1])),
        end=(1, args[-1]),
    ))


def _header():
    source = (
        "module Shapes.Core (Shape, area) where\n"
        "\n"
        "import Prelude\n"
        "import Shapes.Util\n"
        "import Data.List\n"
    )
    t = Tree(source)
    return source, module_of(
        t(K.MODULE_HEADER, (1, "module"),
          t(K.EXPORT_LIST, (1, "("), t(K.ATOM, (1, "Shape", 1)), t(K.ATOM, (1, "area")), end=(1, ")")),
          end=(1, "where")),
        t(K.IMPORT, (3, "import"), end=(3, "Prelude")),
        t(K.IMPORT, (4, "import"), end=(4, "Shapes.Util")),
        t(K.IMPORT, (5, "import"), end=(5, "Data.List")),
    )


def _export_list():
    source = (
        "module Shapes.Core\n"
        "  ( Shape,\n"
        "    area\n"
        "  ) where\n"
    )
    t = Tree(source)
    return source, module_of(t(
        K.MODULE_HEADER, (1, "module"),
        t(K.EXPORT_LIST, (2, "("), t(K.ATOM, (2, "Shape")), t(K.ATOM, (3, "area")), end=(4, ")")),
        end=(4, "where"),
    ))


def _adjacent_declarations():
    source = (
        "-- | One.\n"
        "f :: Int\n"
        "f = 1\n"
        "-- | Two.\n"
        "g :: Int\n"
        "g = 2\n"
    )
    t = Tree(source)
    return source, module_of(
        t(K.SIGNATURE, (1, "--"), end=(2, "Int")),
        t(K.DECLARATION, (3, "f"), t(K.ATOM, (3, "f")), t(K.ATOM, (3, "1")), end=(3, "1")),
        t(K.SIGNATURE, (4, "--"), end=(5, "Int")),
        t(K.DECLARATION, (6, "g"), t(K.ATOM, (6, "g")), t(K.ATOM, (6, "2")), end=(6, "2")),
    )


def _undocumented():
    source = "f :: Int\nf = 1\n"
    t = Tree(source)
    return source, module_of(
        t(K.SIGNATURE, (1, "f"), end=(1, "Int")),
        t(K.DECLARATION, (2, "f"), t(K.ATOM, (2, "f")), t(K.ATOM, (2, "1")), end=(2, "1")),
    )


def _sum_type():
    source = "data Color = Red | Green deriving Show\n"
    t = Tree(source)
    return source, module_of(t(
        K.DATA, (1, "data"),
        t(K.CONSTRUCTOR, (1, "Red")),
        t(K.CONSTRUCTOR, (1, "Green")),
        t(K.DERIVING, (1, "deriving"), t(K.ATOM, (1, "Show")), end=(1, "Show")),
        end=(1, "Show"),
    ))


def _record():
    source = (
        "data Person = Person\n"
        "  { name :: Text,\n"
        "    age :: Int\n"
        "  }\n"
    )
    t = Tree(source)
    return source, module_of(t(
        K.DATA, (1, "data"),
        t(K.RECORD, (1, "Person", 1),
          t(K.FIELD, (2, "name"), t(K.ATOM, (2, "name")), t(K.ATOM, (2, "Text")), end=(2, "Text")),
          t(K.FIELD, (3, "age"), t(K.ATOM, (3, "age")), t(K.ATOM, (3, "Int")), end=(3, "Int")),
          end=(4, "}")),
        end=(4, "}"),
    ))


def _application():
    source = (
        "result = combine first\n"
        "  second\n"
    )
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "result"),
        t(K.ATOM, (1, "result")),
        t(K.APPLICATION, (1, "combine"),
          t(K.ATOM, (1, "combine")), t(K.ATOM, (1, "first")), t(K.ATOM, (2, "second")),
          end=(2, "second")),
        end=(2, "second"),
    ))


def _case():
    source = (
        "f x = case x of\n"
        "  Just y -> y\n"
        "  Nothing  -> 0\n"
    )
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "f"),
        t(K.ATOM, (1, "f x")),
        t(K.CASE, (1, "case"),
          t(K.ATOM, (1, "x", 1)),
          t(K.ALTERNATIVE, (2, "Just"),
            t(K.APPLICATION, (2, "Just"), t(K.ATOM, (2, "Just")), t(K.ATOM, (2, "y")), end=(2, "y")),
            t(K.ATOM, (2, "y", 1)),
            end=(2, "y", 1)),
          t(K.ALTERNATIVE, (3, "Nothing"), t(K.ATOM, (3, "Nothing")), t(K.ATOM, (3, "0")), end=(3, "0")),
          end=(3, "0")),
        end=(3, "0"),
    ))


def _let_order():
    source = (
        "main = do\n"
        "  let total = base + 1\n"
        "      base = 41\n"
        "  print total\n"
    )
    t = Tree(source)
    let = t(
        K.LET_BLOCK, (2, "let"),
        t(K.DECLARATION, (2, "total"), t(K.ATOM, (2, "total")),
          t(K.OPERATOR, (2, "base"), t(K.ATOM, (2, "base")), t(K.ATOM, (2, "1")), end=(2, "1")),
          end=(2, "1")),
        t(K.DECLARATION, (3, "base"), t(K.ATOM, (3, "base")), t(K.ATOM, (3, "41")), end=(3, "41")),
        end=(3, "41"),
    )
    return source, module_of(t(
        K.DECLARATION, (1, "main"),
        t(K.ATOM, (1, "main")),
        t(K.DO_BLOCK, (1, "do"),
          let,
          t(K.APPLICATION, (4, "print"), t(K.ATOM, (4, "print")), t(K.ATOM, (4, "total")),
            end=(4, "total")),
          end=(4, "total")),
        end=(4, "total"),
    ))


def _operator():
    source = (
        "total = alpha +\n"
        "  beta\n"
    )
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "total"),
        t(K.ATOM, (1, "total")),
        t(K.OPERATOR, (1, "alpha"), t(K.ATOM, (1, "alpha")), t(K.ATOM, (2, "beta")), end=(2, "beta")),
        end=(2, "beta"),
    ))


def _collection():
    source = (
        "xs = [ 1,\n"
        "  2 ]\n"
    )
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "xs"),
        t(K.ATOM, (1, "xs")),
        t(K.LIST, (1, "["), t(K.ATOM, (1, "1")), t(K.ATOM, (2, "2")), end=(2, "]")),
        end=(2, "]"),
    ))


def _where():
    source = (
        "f x = g x\n"
        "    where g = id\n"
    )
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "f"),
        t(K.ATOM, (1, "f x")),
        t(K.APPLICATION, (1, "g"), t(K.ATOM, (1, "g")), t(K.ATOM, (1, "x", 1)), end=(1, "x", 1)),
        t(K.WHERE_BLOCK, (2, "where"),
          t(K.DECLARATION, (2, "g"), t(K.ATOM, (2, "g")), t(K.ATOM, (2, "id")), end=(2, "id")),
          end=(2, "id")),
        end=(2, "id"),
    ))


def _if():
    source = (
        "if ok\n"
        "  then yes\n"
        "  else no\n"
    )
    t = Tree(source)
    return source, t(
        K.IF, (1, "if"),
        t(K.ATOM, (1, "ok")), t(K.ATOM, (2, "yes")), t(K.ATOM, (3, "no")),
        end=(3, "no"),
    )


def _rhs_let():
    source = "f x = let y = x in y\n"
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "f"),
        t(K.ATOM, (1, "f x")),
        t(K.LET_BLOCK, (1, "let"),
          t(K.DECLARATION, (1, "y"), t(K.ATOM, (1, "y")), t(K.ATOM, (1, "x", 1)), end=(1, "x", 1)),
          t(K.ATOM, (1, "y", 1)),
          end=(1, "y", 1)),
        end=(1, "y", 1),
    ))


def _far_right():
    pad = " " * 59
    source = (
        "someFunctionName argumentOne argumentTwo argumentThree = combine\n"
        f"{pad}left\n"
        f"{pad}right\n"
    )
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "someFunctionName"),
        t(K.ATOM, (1, "someFunctionName"), end=(1, "argumentThree")),
        t(K.APPLICATION, (1, "combine"),
          t(K.ATOM, (1, "combine")), t(K.ATOM, (2, "left")), t(K.ATOM, (3, "right")),
          end=(3, "right")),
        end=(3, "right"),
    ))


def _dollar_chain():
    source = "main = print $ show $ length xs\n"
    t = Tree(source)
    return source, module_of(t(
        K.DECLARATION, (1, "main"),
        t(K.ATOM, (1, "main")),
        t(K.OPERATOR, (1, "print"),
          t(K.ATOM, (1, "print")),
          t(K.OPERATOR, (1, "show"),
            t(K.ATOM, (1, "show")),
            t(K.APPLICATION, (1, "length"), t(K.ATOM, (1, "length")), t(K.ATOM, (1, "xs")),
              end=(1, "xs")),
            end=(1, "xs")),
          end=(1, "xs")),
        end=(1, "xs"),
    ))


# name -> builder returning (source, tree); each input breaks at least one rule
CASES = {
    "tabs": _tabs,
    "long_line": _long_line,
    "header": _header,
    "export_list": _export_list,
    "adjacent_declarations": _adjacent_declarations,
    "undocumented": _undocumented,
    "sum_type": _sum_type,
    "record": _record,
    "application": _application,
    "case": _case,
    "let_order": _let_order,
    "operator": _operator,
    "collection": _collection,
    "where": _where,
    "if": _if,
    "rhs_let": _rhs_let,
    "far_right": _far_right,
    "dollar_chain": _dollar_chain,
}
