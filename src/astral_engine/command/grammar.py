"""Formal grammar of the quick-entry command micro-syntax.

The grammar is implemented by the state-machine parser in
``astral_engine.command.parser``; these constants are the reference
documentation and are printed by ``astral grammar``.

Grammar notation used here:
    ``::=``     production rule
    ``|``       alternation
    ``( )``     grouping
    ``{ }``     zero or more repetitions
    ``TEXT``    terminal: any run of characters other than ``@ / > =``
                and whitespace
    ``WS``      terminal: a run of whitespace
"""
from __future__ import annotations

# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------

GRAMMAR_COMMAND = """
command    ::= WS? '@' type_token '/' name_token { '>' assignment } EOF

type_token ::= ( TEXT | WS )+
name_token ::= ( TEXT | WS | '/' | '@' | '=' )+
"""

# ---------------------------------------------------------------------------
# Property assignments
# ---------------------------------------------------------------------------

GRAMMAR_ASSIGNMENT = """
assignment ::= prop_name '=' prop_value

prop_name  ::= ( TEXT | WS | '@' | '/' )+
prop_value ::= ( TEXT | WS | '@' | '/' | '=' )*
"""

# ---------------------------------------------------------------------------
# Value forms (interpreted by coercion, not by the parser)
# ---------------------------------------------------------------------------

GRAMMAR_VALUES = """
list_value     ::= '[' item { ',' item } ']' | item { ',' item }
semantic_date  ::= '@'? ( 'hoy' | 'ayer' | 'mañana' | 'esta_semana'
                        | 'semana_pasada' | 'este_mes' | 'mes_pasado' )
boolean        ::= 'sí' | 'si' | 'true' | '1' | 'yes' | 'no' | 'false' | '0'
"""

# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

GRAMMAR_NOTES = """
* Names and values are trimmed; there is no escape for '/', '>' or '='.
* Type, name and property tokens must not be empty.
* A '>' segment without '=' is an error unless it is the last segment,
  which is treated as still being typed and ignored.
"""

COMMAND_GRAMMAR: str = "\n".join(
    [
        GRAMMAR_COMMAND,
        GRAMMAR_ASSIGNMENT,
        GRAMMAR_VALUES,
        GRAMMAR_NOTES,
    ]
)
