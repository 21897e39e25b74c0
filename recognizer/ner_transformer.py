"""
NER Transformer: Lark tree transformer for named entity grammar lines.

This module provides the RuleTransformer class that converts the Lark parse
tree of one grammar line into a RuleDef.
"""

from lark import Transformer, v_args

from recognizer import ner_ast as ast


@v_args(inline=True)  # This simplifies most method signatures
class RuleTransformer(Transformer):
    """
    Transformer that converts the parse tree of a grammar line into a RuleDef.
    """

    def __init__(self, line_number: int = 0, line: str = ""):
        super().__init__()
        self.line_number = line_number
        self.line = line

    def rule_line(self, identifier, surface_forms):
        """Transform a rule line into an entity id with its surface forms."""
        return ast.RuleDef(
            entity_id=identifier,
            surface_forms=surface_forms,
            line_number=self.line_number,
            line=self.line,
        )

    def surface_forms(self, *surfaces):
        """Transform the tab-separated surface forms."""
        return tuple(surfaces)

    def IDENTIFIER(self, token):  # pylint: disable=invalid-name
        """Transform identifier token (follows Lark naming convention)."""
        return str(token)

    def SURFACE(self, token):  # pylint: disable=invalid-name
        """Transform surface form token (follows Lark naming convention)."""
        return str(token)
