"""courier: route message actions to chat platform back-ends."""

__version__ = "0.1.0"
