"""Business logic layer for accounts app.

Credential token lifecycle: registration, login, verification,
refresh and logout. Views only translate HTTP to these calls.
"""
