"""
Composition for Amalgam.

Example usage:
    import amalgam.compose as compose
    import amalgam.rules as rules

    Named = {"name": "", "extend_rules": {"name": rules.STRING_APPEND}}
    Greeter = {
        "implement": [Named],
        "greet": lambda self: f"hello {self['name']}",
    }

    bob = compose.create([Greeter], {"name": "bob"})
    compose.inherits(bob, Named)  # True
"""

from amalgam.compose.ancestry import Ancestry, ancestry_of, is_composed, origin
from amalgam.compose.engine import create, inherits

__all__ = [
    "Ancestry",
    "ancestry_of",
    "create",
    "inherits",
    "is_composed",
    "origin",
]
