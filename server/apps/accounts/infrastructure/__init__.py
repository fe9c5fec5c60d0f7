"""Infrastructure layer for accounts app.

Integrations with external libraries: JWT signing and decoding.
Keep these separate from the token lifecycle logic.
"""
